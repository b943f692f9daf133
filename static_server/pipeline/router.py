"""Request routing."""

import logging

from static_server.bootstrap.config import FAVICON_PATH, STATIC_PREFIX, STATS_PATH
from static_server.domain.correlation_id import get_logger
from static_server.domain.http_types import HttpRequest, HttpResponse
from static_server.domain.response_builders import (
    not_found_response,
    redirect_response,
)
from static_server.handlers.static_handler import favicon_response, static_file_response
from static_server.handlers.system_handlers import handle_index, handle_stats
from static_server.transport.context import WorkerContext

ROUTER_LOGGER = get_logger("pipeline.router")

# Fixed routes answer their trailing-slash form with a redirect.
STRICT_SLASH_ROUTES = {f"{STATS_PATH}/": STATS_PATH, f"{FAVICON_PATH}/": FAVICON_PATH}


def _matched(route: str) -> None:
    if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ROUTER_LOGGER.debug(
            "Route matched", extra={"event": "route_matched", "route": route}
        )


def route_request(request: HttpRequest, context: WorkerContext) -> HttpResponse:
    """Dispatch the request to its handler and return the response."""
    path = request.path

    if path == "/":
        _matched("/")
        return handle_index(request)

    if path == STATS_PATH and context.stats is not None:
        _matched(STATS_PATH)
        return handle_stats(request, context.stats)

    if path == FAVICON_PATH:
        _matched(FAVICON_PATH)
        return favicon_response(request, context.directory)

    if path.startswith(STATIC_PREFIX):
        _matched(f"{STATIC_PREFIX}*")
        return static_file_response(request, context.directory)

    if path in STRICT_SLASH_ROUTES:
        _matched(path)
        return redirect_response(request, STRICT_SLASH_ROUTES[path])

    ROUTER_LOGGER.info(
        "No matching route found",
        extra={"event": "route_not_found", "route": path, "method": request.method},
    )
    return not_found_response(request)
