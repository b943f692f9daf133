"""Startup preparation of the static directory and its favicon."""

import sys
from pathlib import Path
from typing import Optional

import requests

from static_server.bootstrap.config import FAVICON_FILENAME
from static_server.domain.correlation_id import get_logger

ASSETS_LOGGER = get_logger("bootstrap.assets")
DOWNLOAD_TIMEOUT_SECONDS = 10


def ensure_directory(directory: str) -> Path:
    """Create the static directory (and parents) when it does not exist."""
    path = Path(directory)
    if path.is_dir():
        return path
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        ASSETS_LOGGER.critical(
            "Error creating directory",
            extra={
                "event": "directory_create_failed",
                "directory": directory,
                "error": str(error),
            },
        )
        sys.exit(1)
    ASSETS_LOGGER.info(
        "Created static directory",
        extra={"event": "directory_created", "directory": directory},
    )
    return path


def ensure_favicon(
    directory: str,
    favicon_url: Optional[str],
    session: Optional[requests.Session] = None,
) -> Path:
    """Download favicon.ico into ``directory`` unless it is already there.

    A missing URL leaves the favicon absent; the route then answers 404.
    """
    favicon_path = Path(directory) / FAVICON_FILENAME
    if favicon_path.exists() or not favicon_url:
        return favicon_path

    http = session or requests
    try:
        response = http.get(favicon_url, timeout=DOWNLOAD_TIMEOUT_SECONDS)
        response.raise_for_status()
    except requests.RequestException as error:
        ASSETS_LOGGER.critical(
            "Error downloading favicon",
            extra={
                "event": "favicon_download_failed",
                "favicon_url": favicon_url,
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )
        sys.exit(1)

    try:
        favicon_path.write_bytes(response.content)
    except OSError as error:
        ASSETS_LOGGER.critical(
            "Error writing favicon file",
            extra={
                "event": "favicon_write_failed",
                "path": favicon_path.as_posix(),
                "error": str(error),
            },
        )
        sys.exit(1)

    ASSETS_LOGGER.info(
        "Favicon downloaded",
        extra={
            "event": "favicon_downloaded",
            "favicon_url": favicon_url,
            "bytes": len(response.content),
        },
    )
    return favicon_path
