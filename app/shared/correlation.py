"""
Request correlation IDs.

Each request gets an ID, taken from the caller's ``X-Correlation-ID`` (or
``X-Request-ID``) header when present and generated otherwise. It is kept
on ``request.state`` for error bodies, in a context variable for log
records, and echoed back in the ``X-Correlation-ID`` response header.
"""

import contextvars
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

INBOUND_HEADERS = ("X-Correlation-ID", "X-Request-ID")
RESPONSE_HEADER = "X-Correlation-ID"

_current: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    """ID of the request being handled, or None outside a request."""
    return _current.get()


def generate_correlation_id() -> str:
    return uuid.uuid4().hex[:8]


def _inbound_id(request: Request) -> Optional[str]:
    for header in INBOUND_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return None


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Tags every request, its log records and its response with one ID."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = _inbound_id(request) or generate_correlation_id()
        request.state.correlation_id = correlation_id
        token = _current.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            _current.reset(token)
        response.headers[RESPONSE_HEADER] = correlation_id
        return response
