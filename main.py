"""Static file server with a self-monitoring stats endpoint."""

import signal
import sys
from typing import Optional

from static_server.bootstrap.assets import ensure_directory, ensure_favicon
from static_server.bootstrap.config import build_server_config, parse_cli_args
from static_server.bootstrap.logging_setup import configure_logging
from static_server.domain.correlation_id import get_logger
from static_server.lifecycle.state import ServerLifecycle
from static_server.lifecycle.stats import StatsTracker
from static_server.transport.accept_loop import run_server

SERVER_LOGGER = get_logger("server")


def main(argv: Optional[list[str]] = None) -> None:
    """Parse flags, prepare the static directory and serve until signalled."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level, args.log_destination, args.log_format)
    config = build_server_config(args)

    ensure_directory(config.directory)
    ensure_favicon(config.directory, config.favicon_url)

    stats = StatsTracker(window_seconds=config.stats_window_seconds)
    lifecycle = ServerLifecycle()

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info("Received shutdown signal", extra={"signal": signum})
        lifecycle.begin_draining()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    SERVER_LOGGER.info(
        "Starting static server",
        extra={
            "event": "server_starting",
            "host": config.host,
            "port": config.port,
            "directory": config.directory,
            "window_seconds": config.stats_window_seconds,
            "log_destination": args.log_destination,
            "log_level": args.log_level,
            "socket_timeout": config.socket_timeout,
            "shutdown_grace_seconds": config.shutdown_grace_seconds,
        },
    )
    run_server(config, stats, lifecycle)


if __name__ == "__main__":
    main()
