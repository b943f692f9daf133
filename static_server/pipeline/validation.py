"""Request checks applied before routing."""

from typing import Optional

from static_server.domain.http_types import HttpRequest, HttpResponse
from static_server.domain.response_builders import (
    bad_request_response,
    forbidden_response,
    method_not_allowed_response,
)


class RequestEntityTooLarge(Exception):
    """Raised when a request head or body exceeds configured limits."""


def enforce_allowed_method(
    request: HttpRequest, allowed_methods: set[str]
) -> Optional[HttpResponse]:
    if request.method in allowed_methods:
        return None
    return method_not_allowed_response(request, allowed_methods)


def enforce_safe_path(request: HttpRequest) -> Optional[HttpResponse]:
    """Reject relative paths, NUL bytes and ``..`` segments."""
    if not request.path.startswith("/") or "\x00" in request.path:
        return bad_request_response(request)
    if ".." in request.path.split("/"):
        return forbidden_response(request, "Path traversal is not allowed")
    return None


def validate_request(
    request: HttpRequest, allowed_methods: set[str]
) -> Optional[HttpResponse]:
    """Return an error response when the request fails validation checks."""
    method_error = enforce_allowed_method(request, allowed_methods)
    if method_error is not None:
        return method_error
    return enforce_safe_path(request)
