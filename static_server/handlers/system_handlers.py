"""Handlers for the landing page and the stats endpoint."""

import json
from string import Template

from static_server.bootstrap.config import PROJECT_URL, SERVER_NAME, SERVER_VERSION
from static_server.domain.correlation_id import get_logger
from static_server.domain.http_types import HttpRequest, HttpResponse
from static_server.domain.response_builders import (
    html_response,
    internal_error_response,
    json_response,
)
from static_server.lifecycle.stats import StatsTracker

SYSTEM_LOGGER = get_logger("handlers.system")

# Literal wire label, independent of the configured window.
REQUESTS_LABEL = "Requests (60s)"

INDEX_TEMPLATE = Template(
    """<!DOCTYPE html>
<html>
<head>
	<title>$signature</title>
	<style>
			body {
					font-family: monospace, sans-serif;
					display: flex;
					justify-content: center;
					align-items: center;
					height: 100vh;
					margin: 0;
			}
			p {
					text-align: center;
			}
	</style>
</head>
<body>
	<div>
			<p>$signature</p>
			<p>OMG It works ;)</p>
	</div>
	<span style="position: absolute; bottom: 10px; right: 10px;">$version</span>
</body>
</html>"""
)


def render_index_page() -> str:
    return INDEX_TEMPLATE.substitute(
        signature=f"{SERVER_NAME} {SERVER_VERSION}", version=SERVER_VERSION
    )


def handle_index(request: HttpRequest) -> HttpResponse:
    return html_response(render_index_page(), request)


def build_stats_payload(stats: StatsTracker) -> dict:
    """Collect the ``/stats`` document; pruning the ledger is a side effect."""
    snapshot = stats.snapshot()
    return {
        "Name": f"{SERVER_NAME} - {PROJECT_URL}",
        "Version": SERVER_VERSION,
        "Uptime": snapshot.uptime,
        "Threads": snapshot.threads,
        "Ram Usage": snapshot.ram_usage,
        REQUESTS_LABEL: snapshot.requests,
    }


def handle_stats(request: HttpRequest, stats: StatsTracker) -> HttpResponse:
    """Serve the stats document as compact JSON with sorted keys."""
    payload = build_stats_payload(stats)
    try:
        body = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError) as error:
        SYSTEM_LOGGER.error(
            "Failed to encode stats",
            extra={"event": "stats_encode_failed", "error": str(error)},
        )
        return internal_error_response(request, str(error))

    SYSTEM_LOGGER.info(
        "Stats served",
        extra={
            "event": "stats_served",
            "requests_in_window": payload[REQUESTS_LABEL],
            "window_seconds": stats.window_seconds,
        },
    )
    return json_response(body.encode(), request)
