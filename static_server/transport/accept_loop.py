"""Main connection acceptance loop."""

import socket
import threading

from static_server.bootstrap.config import ServerConfig
from static_server.bootstrap.socket_factory import create_server_socket
from static_server.domain.correlation_id import get_logger
from static_server.domain.response_builders import draining_response
from static_server.lifecycle.state import ServerLifecycle
from static_server.lifecycle.stats import StatsTracker
from static_server.pipeline.io import send_response
from static_server.transport.context import WorkerContext
from static_server.transport.worker import handle_client

ACCEPT_LOGGER = get_logger("transport.accept")


def _reject_while_draining(client_socket: socket.socket) -> None:
    try:
        send_response(client_socket, draining_response())
    except OSError:
        pass
    finally:
        client_socket.close()


def _start_worker(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> None:
    if context.lifecycle is not None:
        context.lifecycle.connection_opened()
    thread = threading.Thread(
        target=handle_client,
        args=(client_socket, client_address, context),
        name=f"worker-{client_address[0]}:{client_address[1]}",
        daemon=True,
    )
    thread.start()


def run_server(
    config: ServerConfig, stats: StatsTracker, lifecycle: ServerLifecycle
) -> None:
    """Accept connections until draining starts, then wait for workers."""
    server_socket = create_server_socket(config)
    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={"event": "server_listening", "host": config.host, "port": config.port},
    )

    context = WorkerContext(
        directory=config.directory,
        stats=stats,
        lifecycle=lifecycle,
        config=config,
    )

    try:
        while True:
            try:
                client_socket, client_address = server_socket.accept()
            except socket.timeout:
                if lifecycle.is_draining():
                    break
                continue
            except OSError as error:
                if lifecycle.is_draining():
                    break
                ACCEPT_LOGGER.error(
                    "Socket accept failed",
                    extra={"event": "accept_error", "error_type": type(error).__name__},
                )
                continue

            # Connections that race the drain signal get a 503 until accept idles.
            if lifecycle.is_draining():
                _reject_while_draining(client_socket)
                continue

            _start_worker(client_socket, client_address[:2], context)
    finally:
        server_socket.close()
        ACCEPT_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "grace_seconds": config.shutdown_grace_seconds,
            },
        )
        lifecycle.wait_for_idle(config.shutdown_grace_seconds)
        ACCEPT_LOGGER.info(
            "Server shutdown complete", extra={"event": "server_stopped"}
        )
