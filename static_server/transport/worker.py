"""Worker thread logic for handling individual client connections."""

import logging
import socket
from typing import Optional

from static_server.bootstrap.config import ALLOWED_METHODS
from static_server.domain.correlation_id import (
    clear_correlation_id,
    generate_correlation_id,
    get_logger,
    set_correlation_id,
)
from static_server.domain.http_types import HttpRequest, HttpResponse
from static_server.domain.response_builders import (
    bad_request_response,
    draining_response,
    entity_too_large_response,
)
from static_server.pipeline.accounting import serve_with_accounting
from static_server.pipeline.io import receive_request, send_response
from static_server.pipeline.router import route_request
from static_server.pipeline.validation import RequestEntityTooLarge, validate_request
from static_server.transport.context import WorkerContext

WORKER_LOGGER = get_logger("transport.worker")


def _read_request(
    client_socket: socket.socket, buffer: bytes, client_addr_str: str
) -> tuple[Optional[HttpRequest], bytes]:
    """Read one request, answering and returning ``None`` on malformed input."""
    try:
        return receive_request(client_socket, buffer)
    except RequestEntityTooLarge:
        WORKER_LOGGER.warning(
            "Request size exceeded limit",
            extra={"event": "request_too_large", "client": client_addr_str},
        )
        send_response(client_socket, entity_too_large_response())
    except (ValueError, UnicodeDecodeError):
        WORKER_LOGGER.warning(
            "Malformed request received",
            extra={"event": "malformed_request", "client": client_addr_str},
        )
        send_response(client_socket, bad_request_response(None))
    return None, b""


def _process_request(
    request: HttpRequest, context: WorkerContext, client_socket: socket.socket
) -> bool:
    """Validate, route and answer one request; return True to close the connection."""
    validation_response = validate_request(request, ALLOWED_METHODS)
    if validation_response is not None:
        send_response(client_socket, validation_response, request.wants_body)
        return validation_response.close_connection

    def _serve(routed: HttpRequest) -> HttpResponse:
        response = route_request(routed, context)
        send_response(client_socket, response, routed.wants_body)
        return response

    response = serve_with_accounting(request, context.stats, _serve)
    return response.close_connection


def _close_socket(client_socket: socket.socket) -> None:
    try:
        client_socket.shutdown(socket.SHUT_WR)
    except OSError:
        pass
    client_socket.close()


def handle_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> None:
    """Serve requests on one keep-alive connection until it is closed."""
    buffer = b""
    client_addr_str = f"{client_address[0]}:{client_address[1]}"
    lifecycle = context.lifecycle
    if context.config is not None:
        client_socket.settimeout(context.config.socket_timeout)

    try:
        while True:
            set_correlation_id(generate_correlation_id())

            request, buffer = _read_request(client_socket, buffer, client_addr_str)
            if request is None:
                if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
                    WORKER_LOGGER.debug(
                        "Connection finished",
                        extra={
                            "event": "client_disconnected",
                            "client": client_addr_str,
                        },
                    )
                break

            # Every request read once draining has begun is answered with a 503.
            if lifecycle is not None and lifecycle.is_draining():
                send_response(client_socket, draining_response(), request.wants_body)
                break

            if _process_request(request, context, client_socket):
                break
            clear_correlation_id()
    except (ConnectionError, TimeoutError, OSError) as error:
        WORKER_LOGGER.error(
            "Error handling client connection",
            extra={
                "event": "connection_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
        )
    except Exception as error:  # pylint: disable=broad-except
        WORKER_LOGGER.error(
            "Unexpected error in worker",
            extra={
                "event": "worker_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
                "error": str(error),
            },
            exc_info=True,
        )
    finally:
        _close_socket(client_socket)
        if lifecycle is not None:
            lifecycle.connection_closed()
        clear_correlation_id()
