"""Unit tests covering HTTP request parsing and response serialization."""

import pytest

from static_server.bootstrap.config import MAX_BODY_BYTES, MAX_HEADER_BYTES
from static_server.domain.correlation_id import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from static_server.domain.http_types import HttpRequest, HttpResponse, should_close
from static_server.pipeline.io import (
    determine_content_length,
    parse_headers,
    parse_request_line,
    receive_request,
    send_response,
)
from static_server.pipeline.validation import RequestEntityTooLarge
from tests.utils.sockets import FakeSocket


@pytest.fixture(autouse=True)
def reset_correlation_id():
    clear_correlation_id()
    yield
    clear_correlation_id()


def test_parse_headers_normalizes_keys_and_skips_invalid_lines():
    """Header parsing should lowercase keys and ignore malformed lines."""
    headers = parse_headers(
        [
            "Content-Length: 10",
            "User-Agent: ExampleClient",
            "x-custom: value",
            "invalid-line",
            ": no-name",
        ]
    )
    assert headers == {
        "content-length": "10",
        "user-agent": "ExampleClient",
        "x-custom": "value",
    }


def test_parse_request_line_decodes_path_and_drops_query():
    method, path = parse_request_line("GET /static/my%20file.txt?v=2 HTTP/1.1")

    assert method == "GET"
    assert path == "/static/my file.txt"


@pytest.mark.parametrize(
    "line", ["GET /", "GET / HTTP/1.1 extra", "GET / FTP/1.0", ""]
)
def test_parse_request_line_rejects_malformed_lines(line):
    with pytest.raises(ValueError):
        parse_request_line(line)


def test_determine_content_length():
    assert determine_content_length({}) == 0
    assert determine_content_length({"content-length": "12"}) == 12
    with pytest.raises(ValueError):
        determine_content_length({"content-length": "twelve"})
    with pytest.raises(ValueError):
        determine_content_length({"content-length": "-1"})
    with pytest.raises(RequestEntityTooLarge):
        determine_content_length({"content-length": str(MAX_BODY_BYTES + 1)})


def test_receive_request_handles_partial_reads_and_leftover_bytes():
    """Receiving a request must tolerate partial socket reads."""
    request_bytes = (
        b"GET /static/app.js HTTP/1.1\r\n"
        b"Host: localhost\r\n"
        b"Content-Length: 5\r\n\r\n"
        b"helloEXTRA"
    )
    client = FakeSocket(
        [request_bytes[:25], request_bytes[25:50], request_bytes[50:]]
    )

    request, leftover = receive_request(client, b"")

    assert isinstance(request, HttpRequest)
    assert request.path == "/static/app.js"
    assert request.headers["host"] == "localhost"
    assert request.body == b"hello"
    assert leftover == b"EXTRA"


def test_receive_request_uses_buffered_pipelined_request():
    client = FakeSocket([])

    request, leftover = receive_request(client, b"HEAD /stats HTTP/1.1\r\n\r\n")

    assert request.method == "HEAD"
    assert request.path == "/stats"
    assert leftover == b""


def test_receive_request_returns_none_when_socket_closes_early():
    """If the client disconnects early the parser should return nothing."""
    client = FakeSocket([b"GET / HTTP/1.1\r\n"])

    request, buffer = receive_request(client, b"")

    assert request is None
    assert buffer == b""


def test_receive_request_rejects_oversized_headers():
    client = FakeSocket([b"GET / HTTP/1.1\r\nX-Big: " + b"a" * (MAX_HEADER_BYTES + 1)])

    with pytest.raises(RequestEntityTooLarge):
        receive_request(client, b"")


def test_receive_request_adopts_incoming_request_id():
    client = FakeSocket([b"GET / HTTP/1.1\r\nX-Request-ID: trace-42\r\n\r\n"])

    receive_request(client, b"")

    assert get_correlation_id() == "trace-42"


def test_should_close_honors_connection_header():
    assert not should_close({})
    assert not should_close({"connection": "keep-alive"})
    assert should_close({"connection": "Close"})


def test_send_response_writes_content_length_and_request_id():
    set_correlation_id("cid-7")
    client = FakeSocket()
    response = HttpResponse(
        "HTTP/1.1 200 OK", {"Content-Type": "text/plain"}, b"hello", False
    )

    send_response(client, response)

    head, body = client.responses()[0]
    assert head.startswith("HTTP/1.1 200 OK\r\n")
    assert "Content-Length: 5" in head
    assert "X-Request-ID: cid-7" in head
    assert "Connection: close" not in head
    assert body == b"hello"


def test_send_response_marks_closing_connections():
    client = FakeSocket()

    send_response(client, HttpResponse("HTTP/1.1 404 Not Found", {}, b"", True))

    assert "Connection: close" in client.sent.decode()


def test_send_response_streams_chunks():
    client = FakeSocket()
    response = HttpResponse(
        "HTTP/1.1 200 OK",
        {"Content-Type": "text/plain"},
        b"",
        False,
        body_iter=iter([b"abc", b"", b"0123456789"]),
        use_chunked=True,
    )

    send_response(client, response)

    head, _, body = client.sent.partition(b"\r\n\r\n")
    assert b"Transfer-Encoding: chunked" in head
    assert b"Content-Length" not in head
    assert body == b"3\r\nabc\r\nA\r\n0123456789\r\n0\r\n\r\n"


def test_send_response_without_body_never_starts_stream():
    client = FakeSocket()
    started = []

    def chunks():
        started.append(True)
        yield b"data"

    response = HttpResponse(
        "HTTP/1.1 200 OK", {}, b"", False, body_iter=chunks(), use_chunked=True
    )

    send_response(client, response, include_body=False)

    assert client.sent.endswith(b"\r\n\r\n")
    assert b"Transfer-Encoding: chunked" in client.sent
    assert not started


def test_send_response_head_keeps_declared_length():
    client = FakeSocket()

    send_response(
        client, HttpResponse("HTTP/1.1 200 OK", {}, b"payload", False), False
    )

    assert b"Content-Length: 7" in client.sent
    assert not client.sent.endswith(b"payload")
