"""Request-scoped middleware for API requests."""

import logging
import re
import time
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

# Upstream proxies may assign the id; accept only short opaque tokens
_INBOUND_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{8,128}$")

_current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)


def get_request_id() -> str | None:
    """Request id of the request being served, or None outside a request."""
    return _current_request_id.get()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Assigns a request ID to every request and logs one line per request.

    A well-formed inbound X-Request-ID is kept so traces line up across
    services; anything else is replaced with a fresh UUID. The id is echoed
    in the X-Request-ID header and in the response envelope's meta.
    """

    async def dispatch(self, request: Request, call_next):
        inbound = request.headers.get("X-Request-ID", "")
        request_id = inbound if _INBOUND_REQUEST_ID.match(inbound) else str(uuid4())
        request.state.request_id = request_id
        token = _current_request_id.set(request_id)

        started = time.monotonic()
        try:
            response = await call_next(request)
        finally:
            _current_request_id.reset(token)
        elapsed_ms = (time.monotonic() - started) * 1000

        response.headers["X-Request-ID"] = request_id
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({elapsed_ms:.1f}ms) [{request_id}]"
        )
        return response
