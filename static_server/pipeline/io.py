"""Reading requests from and writing responses to client sockets."""

import logging
import socket
import urllib.parse
from typing import Iterable, Optional, Tuple

from static_server.bootstrap.config import (
    HEADER_DELIMITER,
    MAX_BODY_BYTES,
    MAX_HEADER_BYTES,
)
from static_server.domain.correlation_id import (
    get_correlation_id,
    get_logger,
    set_correlation_id,
)
from static_server.domain.http_types import HttpRequest, HttpResponse
from static_server.pipeline.validation import RequestEntityTooLarge

IO_LOGGER = get_logger("pipeline.io")
RECV_SIZE = 4096
HEAD_ENCODING = "iso-8859-1"
LAST_CHUNK = b"0\r\n\r\n"


class PeerClosed(Exception):
    """The client hung up before a full request arrived."""


def parse_headers(lines: list[str]) -> dict[str, str]:
    """Map header lines to a dict keyed by lowercase name; junk lines are dropped."""
    pairs = (line.partition(":") for line in lines)
    return {
        name.strip().lower(): value.strip()
        for name, colon, value in pairs
        if colon and name.strip()
    }


def parse_request_line(request_line: str) -> Tuple[str, str]:
    """Return the method and percent-decoded path, dropping any query string."""
    try:
        method, target, version = request_line.split(" ")
    except ValueError as exc:
        raise ValueError("Invalid request line") from exc
    if not version.startswith("HTTP/"):
        raise ValueError("Invalid request line")
    return method, urllib.parse.unquote(urllib.parse.urlsplit(target).path)


def determine_content_length(headers: dict[str, str]) -> int:
    """Validate and return the declared Content-Length (0 when absent)."""
    declared = headers.get("content-length", "0")
    if not declared.isdigit():
        raise ValueError(f"Invalid Content-Length: {declared!r}")
    length = int(declared)
    if length > MAX_BODY_BYTES:
        raise RequestEntityTooLarge
    return length


def _recv_more(client_socket: socket.socket, data: bytes) -> bytes:
    chunk = client_socket.recv(RECV_SIZE)
    if not chunk:
        raise PeerClosed
    return data + chunk


def _read_head(client_socket: socket.socket, buffer: bytes) -> Tuple[bytes, bytes]:
    while HEADER_DELIMITER not in buffer:
        if len(buffer) > MAX_HEADER_BYTES:
            raise RequestEntityTooLarge
        buffer = _recv_more(client_socket, buffer)
    head, rest = buffer.split(HEADER_DELIMITER, 1)
    if len(head) > MAX_HEADER_BYTES:
        raise RequestEntityTooLarge
    return head, rest


def receive_request(
    client_socket: socket.socket, buffer: bytes
) -> Tuple[Optional[HttpRequest], bytes]:
    """Read until one complete request is buffered.

    Returns ``(None, b"")`` when the peer closes the connection first, and the
    bytes past the request (pipelined data) as the second element otherwise.
    An ``X-Request-ID`` header replaces the current correlation ID.
    """
    try:
        head, rest = _read_head(client_socket, buffer)
        request_line, *header_lines = head.decode(HEAD_ENCODING).split("\r\n")
        method, path = parse_request_line(request_line)
        headers = parse_headers(header_lines)

        if headers.get("x-request-id"):
            set_correlation_id(headers["x-request-id"])

        body_length = determine_content_length(headers)
        while len(rest) < body_length:
            rest = _recv_more(client_socket, rest)
    except PeerClosed:
        return None, b""

    if IO_LOGGER.logger.isEnabledFor(logging.DEBUG):
        IO_LOGGER.debug(
            "Parsed request",
            extra={"event": "request_parsed", "method": method, "path": path},
        )
    request = HttpRequest(method, path, headers, rest[:body_length])
    return request, rest[body_length:]


def _encode_head(response: HttpResponse) -> bytes:
    """Status line plus headers, with framing and request-ID headers added."""
    headers = dict(response.headers)
    correlation_id = get_correlation_id()
    if correlation_id:
        headers["X-Request-ID"] = correlation_id
    if response.use_chunked:
        headers["Transfer-Encoding"] = "chunked"
    else:
        headers["Content-Length"] = str(len(response.body))
    if response.close_connection:
        headers["Connection"] = "close"

    lines = [response.status_line, *(f"{k}: {v}" for k, v in headers.items())]
    return "\r\n".join(lines).encode(HEAD_ENCODING) + HEADER_DELIMITER


def _write_chunks(client_socket: socket.socket, chunks: Iterable[bytes]) -> None:
    for chunk in chunks:
        if chunk:
            client_socket.sendall(b"%X\r\n%s\r\n" % (len(chunk), chunk))
    client_socket.sendall(LAST_CHUNK)


def send_response(
    client_socket: socket.socket, response: HttpResponse, include_body: bool = True
) -> None:
    """Serialize and send a response.

    With ``include_body`` false (HEAD) only the header block is written and a
    streaming body iterator is never started.
    """
    head = _encode_head(response)
    if not include_body:
        client_socket.sendall(head)
    elif response.use_chunked and response.body_iter is not None:
        client_socket.sendall(head)
        _write_chunks(client_socket, response.body_iter)
    else:
        client_socket.sendall(head + response.body)

    if IO_LOGGER.logger.isEnabledFor(logging.DEBUG):
        IO_LOGGER.debug(
            "Sent response",
            extra={"event": "response_sent", "status_code": response.status_code},
        )
