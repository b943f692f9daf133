"""Integration tests for structured request logs and correlation IDs."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
import requests

pytestmark = pytest.mark.integration

if TYPE_CHECKING:
    from tests.utils.server import ServerProcessInfo


def _read_logs(log_file: Path, event: str, timeout: float = 2.0) -> list[dict]:
    deadline = time.monotonic() + timeout
    while True:
        records = [
            json.loads(line)
            for line in log_file.read_text().splitlines()
            if line.strip()
        ]
        matching = [record for record in records if record.get("event") == event]
        if matching or time.monotonic() > deadline:
            return matching
        time.sleep(0.05)


def test_startup_is_logged_as_json(server_process: "ServerProcessInfo") -> None:
    (record,) = _read_logs(server_process["log_file"], "server_starting")

    assert record["message"] == "Starting static server"
    assert record["component"] == "server"
    assert record["port"] == server_process["port"]
    assert record["window_seconds"] == 60.0


def test_request_id_is_echoed_and_logged(server_process: "ServerProcessInfo") -> None:
    base_url = server_process["base_url"]

    response = requests.get(
        f"{base_url}/static/missing.txt",
        headers={"X-Request-ID": "trace-abc"},
        timeout=5,
    )

    assert response.headers["X-Request-ID"] == "trace-abc"
    records = _read_logs(server_process["log_file"], "request_received")
    assert [r["message"] for r in records] == ["GET /static/missing.txt"]
    assert records[0]["correlation_id"] == "trace-abc"
    assert records[0]["component"] == "pipeline.accounting"


def test_generated_request_ids_differ(base_url: str) -> None:
    with requests.Session() as session:
        first = session.get(f"{base_url}/stats", timeout=5)
        second = session.get(f"{base_url}/stats", timeout=5)

    assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]


def test_root_and_favicon_are_not_logged(server_process: "ServerProcessInfo") -> None:
    base_url = server_process["base_url"]
    requests.get(f"{base_url}/", timeout=5)
    requests.get(f"{base_url}/favicon.ico", timeout=5)
    requests.get(f"{base_url}/stats", timeout=5)

    records = _read_logs(server_process["log_file"], "stats_served")
    assert len(records) == 1
    routes = [
        r["route"]
        for r in _read_logs(server_process["log_file"], "request_received")
    ]
    assert routes == ["/stats"]


def test_hashed_asset_paths_are_logged_unchanged(
    server_process: "ServerProcessInfo",
) -> None:
    route = "/static/app.0123456789abcdef0123456789abcdef.js"
    requests.get(f"{server_process['base_url']}{route}", timeout=5)

    records = _read_logs(server_process["log_file"], "request_received")
    assert [r["route"] for r in records] == [route]
    assert records[0]["message"] == f"GET {route}"
