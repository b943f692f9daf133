"""Static file and favicon handlers."""

import logging
import mimetypes
import os
import stat
from pathlib import Path
from typing import Iterator

from static_server.bootstrap.config import FAVICON_FILENAME
from static_server.domain.correlation_id import get_logger
from static_server.domain.http_types import HttpRequest, HttpResponse
from static_server.domain.response_builders import (
    forbidden_response,
    internal_error_response,
    not_found_response,
    stream_response,
)
from static_server.domain.static_paths import PathOutsideRoot, resolve_static_path

FILE_LOGGER = get_logger("handlers.static")
CHUNK_SIZE = 64 * 1024

FAVICON_CONTENT_TYPE = "image/x-icon"


def stream_file(filepath: Path, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Yield file contents in fixed-size chunks; the file opens on first use."""
    with open(filepath, "rb") as file_handle:
        while True:
            chunk = file_handle.read(chunk_size)
            if not chunk:
                break
            yield chunk


def content_type_for(filepath: Path) -> str:
    mime_type, _ = mimetypes.guess_type(filepath.as_posix())
    return mime_type or "application/octet-stream"


def _serve_path(
    request: HttpRequest, resolved_path: Path, content_type: str
) -> HttpResponse:
    """Stream a regular file, rejecting directories and unreadable paths."""
    try:
        file_stat = resolved_path.stat()
    except (FileNotFoundError, NotADirectoryError):
        FILE_LOGGER.info(
            "File not found",
            extra={"event": "file_not_found", "path": resolved_path.as_posix()},
        )
        return not_found_response(request, "File not found")
    except OSError as error:
        FILE_LOGGER.error(
            "Error accessing file",
            extra={
                "event": "file_access_error",
                "path": resolved_path.as_posix(),
                "error_type": type(error).__name__,
            },
        )
        return internal_error_response(request, "Error accessing file")

    if stat.S_ISDIR(file_stat.st_mode):
        FILE_LOGGER.warning(
            "Directory listing refused",
            extra={
                "event": "directory_listing_refused",
                "path": resolved_path.as_posix(),
            },
        )
        return forbidden_response(request, "Directory listing is not allowed")

    if not os.access(resolved_path, os.R_OK):
        return not_found_response(request, "File not found")

    if FILE_LOGGER.logger.isEnabledFor(logging.DEBUG):
        FILE_LOGGER.debug(
            "Streaming file",
            extra={
                "event": "file_stream_started",
                "path": resolved_path.as_posix(),
                "bytes": file_stat.st_size,
            },
        )
    return stream_response(request, content_type, stream_file(resolved_path))


def static_file_response(request: HttpRequest, directory: str) -> HttpResponse:
    """Serve ``/static/<path>`` from ``directory``."""
    try:
        resolved_path = resolve_static_path(directory, request.path)
    except PathOutsideRoot as error:
        FILE_LOGGER.warning(
            "Forbidden path access blocked",
            extra={"event": "forbidden_path", "path": error.request_path},
        )
        return forbidden_response(request, "Path traversal is not allowed")
    return _serve_path(request, resolved_path, content_type_for(resolved_path))


def favicon_response(request: HttpRequest, directory: str) -> HttpResponse:
    """Serve ``favicon.ico`` from the root of the static directory."""
    favicon_path = Path(directory).resolve() / FAVICON_FILENAME
    return _serve_path(request, favicon_path, FAVICON_CONTENT_TYPE)
