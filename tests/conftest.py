"""Shared pytest fixtures for integration and unit tests."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Generator

import pytest

from tests.utils.http import reserve_port
from tests.utils.server import PROJECT_ROOT, ServerProcessInfo, launch_server

if TYPE_CHECKING:
    from _pytest.tmpdir import TempPathFactory


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Expose the repository root path to tests."""

    return PROJECT_ROOT


@pytest.fixture(name="server_process")
def _server_process(
    tmp_path_factory: "TempPathFactory",
) -> Generator[ServerProcessInfo, None, None]:
    """Launch the server with a short drain period for integration tests."""

    host = "127.0.0.1"
    directory = tmp_path_factory.mktemp("static-files")
    yield from launch_server(
        host,
        reserve_port(host),
        directory,
        ["--shutdown-grace-seconds", "5"],
    )


@pytest.fixture()
def base_url(server_process: ServerProcessInfo) -> str:
    """Expose the running server base URL to integration tests."""

    return server_process["base_url"]
