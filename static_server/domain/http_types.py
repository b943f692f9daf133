"""Request and response containers shared by the pipeline and handlers."""

from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass
class HttpRequest:
    """A parsed HTTP request with lowercase header names."""

    method: str
    path: str
    headers: dict[str, str]
    body: bytes = b""

    @property
    def wants_body(self) -> bool:
        return self.method != "HEAD"


@dataclass
class HttpResponse:
    """A response ready for serialization.

    ``body_iter`` is only consumed when ``use_chunked`` is set and the request
    was not a HEAD request.
    """

    status_line: str
    headers: dict[str, str]
    body: bytes
    close_connection: bool
    body_iter: Optional[Iterable[bytes]] = None
    use_chunked: bool = False

    @property
    def status_code(self) -> int:
        return int(self.status_line.split(" ", 2)[1])


def should_close(headers: dict[str, str]) -> bool:
    """Return True when the client asked for ``Connection: close``."""
    return headers.get("connection", "").lower() == "close"
