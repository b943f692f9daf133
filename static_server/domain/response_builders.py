"""Pure HTTP response builders."""

from typing import Iterable, Optional

from static_server.bootstrap.config import SECURITY_HEADERS, SERVER_SIGNATURE
from static_server.domain.http_types import HttpRequest, HttpResponse, should_close

ERROR_CONTENT_TYPE = "text/plain; charset=utf-8"


def _close_for(request: Optional[HttpRequest]) -> bool:
    return should_close(request.headers) if request is not None else True


def _ok(request: HttpRequest, content_type: str, body: bytes) -> HttpResponse:
    headers = {"Content-Type": content_type, **SECURITY_HEADERS}
    return HttpResponse("HTTP/1.1 200 OK", headers, body, should_close(request.headers))


def html_response(markup: str, request: HttpRequest) -> HttpResponse:
    return _ok(request, "text/html", markup.encode())


def json_response(payload: bytes, request: HttpRequest) -> HttpResponse:
    return _ok(request, "application/json", payload)


def stream_response(
    request: HttpRequest, content_type: str, chunks: Iterable[bytes]
) -> HttpResponse:
    """Return a 200 response whose body is sent with chunked transfer encoding."""
    headers = {"Content-Type": content_type, **SECURITY_HEADERS}
    return HttpResponse(
        "HTTP/1.1 200 OK",
        headers,
        b"",
        should_close(request.headers),
        body_iter=chunks,
        use_chunked=True,
    )


def error_response(
    status: str,
    reason: str,
    request: Optional[HttpRequest],
    extra_headers: Optional[dict[str, str]] = None,
    close_connection: Optional[bool] = None,
) -> HttpResponse:
    """Plain-text error page, e.g. ``HTTP 404: Static Server v1.0.0 - ...``."""
    code = status.split(" ", 1)[0]
    body = f"HTTP {code}: {SERVER_SIGNATURE} - {reason}\n".encode()
    headers = {
        "Content-Type": ERROR_CONTENT_TYPE,
        **(extra_headers or {}),
        **SECURITY_HEADERS,
    }
    if close_connection is None:
        close_connection = _close_for(request)
    return HttpResponse(f"HTTP/1.1 {status}", headers, body, close_connection)


def not_found_response(
    request: HttpRequest, reason: str = "That file was not found"
) -> HttpResponse:
    return error_response("404 Not Found", reason, request)


def forbidden_response(
    request: Optional[HttpRequest], reason: str = "Forbidden"
) -> HttpResponse:
    return error_response("403 Forbidden", reason, request)


def internal_error_response(request: HttpRequest, reason: str) -> HttpResponse:
    return error_response("500 Internal Server Error", reason, request)


def bad_request_response(request: Optional[HttpRequest]) -> HttpResponse:
    return error_response("400 Bad Request", "Bad request", request)


def entity_too_large_response() -> HttpResponse:
    """413 response; the connection is always closed afterwards."""
    return error_response(
        "413 Payload Too Large", "Request too large", None, close_connection=True
    )


def method_not_allowed_response(
    request: HttpRequest, allowed_methods: Iterable[str]
) -> HttpResponse:
    allow_header = ", ".join(sorted(allowed_methods))
    return error_response(
        "405 Method Not Allowed",
        "Method not allowed",
        request,
        extra_headers={"Allow": allow_header},
    )


def redirect_response(request: HttpRequest, location: str) -> HttpResponse:
    """301 redirect used to strip trailing slashes from fixed routes."""
    headers = {"Location": location, **SECURITY_HEADERS}
    return HttpResponse(
        "HTTP/1.1 301 Moved Permanently",
        headers,
        b"",
        should_close(request.headers),
    )


def draining_response() -> HttpResponse:
    """503 sent while the server is shutting down."""
    headers = {"Connection": "close", **SECURITY_HEADERS}
    return HttpResponse("HTTP/1.1 503 Service Unavailable", headers, b"draining", True)
