"""Middleware that logs each routed request and records its completion time."""

from typing import Callable, Optional

from static_server.bootstrap.config import FAVICON_PATH
from static_server.domain.correlation_id import get_logger
from static_server.domain.http_types import HttpRequest, HttpResponse
from static_server.lifecycle.stats import StatsTracker

ACCOUNTING_LOGGER = get_logger("pipeline.accounting")

UNLOGGED_PATHS = frozenset({"/", FAVICON_PATH})
UNCOUNTED_PATHS = frozenset({FAVICON_PATH})


def serve_with_accounting(
    request: HttpRequest,
    stats: Optional[StatsTracker],
    serve: Callable[[HttpRequest], HttpResponse],
) -> HttpResponse:
    """Run ``serve`` (route and write the response), then record the request.

    The timestamp is taken after ``serve`` returns, so handler latency is not
    part of the recorded instant. Favicon requests are never recorded.
    """
    if request.path not in UNLOGGED_PATHS:
        ACCOUNTING_LOGGER.info(
            f"{request.method} {request.path}",
            extra={
                "event": "request_received",
                "method": request.method,
                "route": request.path,
            },
        )

    response = serve(request)

    if stats is not None and request.path not in UNCOUNTED_PATHS:
        stats.record_request()
    return response
