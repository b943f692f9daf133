"""Server configuration and CLI argument parsing."""

import argparse
import math
import os
import re
from dataclasses import dataclass
from typing import Optional

SERVER_NAME = "Static Server"
SERVER_VERSION = "v1.0.0"
SERVER_SIGNATURE = f"{SERVER_NAME} {SERVER_VERSION}"
PROJECT_URL = "https://github.com/donuts-are-good/static"
DEFAULT_FAVICON_URL = (
    "https://raw.githubusercontent.com/donuts-are-good/static/master/favicon.ico"
)

ENV_PREFIX = "STATIC_SERVER_"


def _env_str(name: str, default: str) -> str:
    return os.getenv(ENV_PREFIX + name, default)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(ENV_PREFIX + name)
    return int(value) if value is not None else default


DEFAULT_DIRECTORY = _env_str("DIRECTORY", "./web")
DEFAULT_HOST = _env_str("HOST", "0.0.0.0")
DEFAULT_PORT = _env_int("PORT", 3456)
DEFAULT_STATS_WINDOW = _env_str("STATS_WINDOW", "60s")
DEFAULT_SOCKET_TIMEOUT = _env_int("SOCKET_TIMEOUT", 60)
DEFAULT_SHUTDOWN_GRACE_SECONDS = _env_int("SHUTDOWN_GRACE_SECONDS", 30)
MAX_BODY_BYTES = _env_int("MAX_BODY_BYTES", 1024 * 1024)
MAX_HEADER_BYTES = 64 * 1024

HEADER_DELIMITER = b"\r\n\r\n"
ALLOWED_METHODS = {"GET", "HEAD"}
STATIC_PREFIX = "/static/"
STATS_PATH = "/stats"
FAVICON_PATH = "/favicon.ico"
FAVICON_FILENAME = "favicon.ico"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ms|s|m|h)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}

HELP_EPILOG = f"""\
usage examples:
  run the server with default settings:
    $ static-server
  run the server on a different port:
    $ static-server --port 8080
  serve static files from a different directory:
    $ static-server --directory /path/to/static/files
  change the duration for calculating request statistics:
    $ static-server --stats-window 120s

endpoints:
  /             serves the 'it works' page
  /stats        server statistics in JSON format
  /favicon.ico  serves the favicon
  /static/      serves files from the static directory (default: {DEFAULT_DIRECTORY})
"""


@dataclass(frozen=True)
class ServerConfig:
    """Startup configuration, fixed for the life of the process."""

    directory: str
    host: str
    port: int
    stats_window_seconds: float = 60.0
    favicon_url: Optional[str] = DEFAULT_FAVICON_URL
    socket_timeout: int = DEFAULT_SOCKET_TIMEOUT
    shutdown_grace_seconds: int = DEFAULT_SHUTDOWN_GRACE_SECONDS


def parse_duration(value: str) -> float:
    """Parse ``"90s"``, ``"1h30m"``, ``"500ms"`` or plain seconds into seconds."""
    text = value.strip()
    sign = 1.0
    if text[:1] in {"-", "+"}:
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if not text:
        raise argparse.ArgumentTypeError(f"invalid duration: {value!r}")
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise argparse.ArgumentTypeError(f"invalid duration: {value!r}")
        return sign * seconds

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        amount, unit = match.groups()
        total += float(amount) * _DURATION_UNITS[unit]
        position = match.end()
    if position != len(text):
        raise argparse.ArgumentTypeError(f"invalid duration: {value!r}")
    return sign * total


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(
        prog="static-server",
        description=(
            f"{SERVER_SIGNATURE} is an HTTP server that serves static files. "
            "Directory listing is always disabled."
        ),
        epilog=HELP_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--directory",
        default=DEFAULT_DIRECTORY,
        help="directory from which static files are served",
    )
    parser.add_argument("--host", default=DEFAULT_HOST, help="address to bind")
    parser.add_argument(
        "--port", type=int, default=DEFAULT_PORT, help="port to listen on"
    )
    parser.add_argument(
        "--stats-window",
        "--statswindow",
        dest="stats_window",
        type=parse_duration,
        default=parse_duration(DEFAULT_STATS_WINDOW),
        help="duration for calculating request statistics, e.g. 60s or 2m",
    )
    parser.add_argument(
        "--favicon-url",
        default=_env_str("FAVICON_URL", DEFAULT_FAVICON_URL),
        help="where to fetch favicon.ico when it is missing (empty to skip)",
    )
    parser.add_argument(
        "--log-level",
        default=_env_str("LOG_LEVEL", "INFO").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=_env_str("LOG_DESTINATION", "stdout"),
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-format",
        default=_env_str("LOG_FORMAT", "json").lower(),
        choices=["json", "text"],
        type=str.lower,
    )
    parser.add_argument(
        "--socket-timeout",
        type=int,
        default=DEFAULT_SOCKET_TIMEOUT,
        help="idle timeout in seconds for client connections",
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=int,
        default=DEFAULT_SHUTDOWN_GRACE_SECONDS,
        help="grace period in seconds for graceful shutdown",
    )
    return parser.parse_args(argv)


def build_server_config(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        directory=args.directory,
        host=args.host,
        port=args.port,
        stats_window_seconds=args.stats_window,
        favicon_url=args.favicon_url or None,
        socket_timeout=args.socket_timeout,
        shutdown_grace_seconds=args.shutdown_grace_seconds,
    )
