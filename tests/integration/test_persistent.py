from __future__ import annotations

import socket

import pytest

from tests.utils.http import build_request, read_http_response

pytestmark = pytest.mark.integration


def test_multiple_requests_share_connection(server_process):
    host = server_process["host"]
    port = server_process["port"]
    (server_process["directory"] / "page.txt").write_text("chunked body")

    with socket.create_connection((host, port), timeout=5) as client:
        client.sendall(build_request("/"))
        first = read_http_response(client)
        assert first.status_code == 200
        assert b"OMG It works" in first.body

        client.sendall(build_request("/static/page.txt"))
        second = read_http_response(client)
        assert second.body == b"chunked body"
        assert second.chunk_sizes[-1] == 0

        client.sendall(build_request("/stats", connection="close"))
        final = read_http_response(client)
        assert final.headers["connection"] == "close"
        assert b'"Requests (60s)":2' in final.body

        client.settimeout(1)
        remaining = client.recv(1)
        assert remaining == b""


def test_head_keeps_connection_usable(server_process):
    host = server_process["host"]
    port = server_process["port"]

    with socket.create_connection((host, port), timeout=5) as client:
        client.sendall(build_request("/stats", method="HEAD"))
        head = read_http_response(client, expect_body=False)
        assert head.status_code == 200
        assert int(head.headers["content-length"]) > 0
        assert head.body == b""

        client.sendall(build_request("/", connection="close"))
        follow_up = read_http_response(client)
        assert follow_up.status_code == 200
