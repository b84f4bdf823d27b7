"""
Request Context Middleware

Assigns every request an id, binds it as the log correlation id, logs the
request outcome, and converts any exception that escaped the route
handlers into an InternalError envelope.
"""

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ai_gateway.api.errors import REQUEST_ID_HEADER, internal_error_response
from ai_gateway.observability.logging import (
    get_logger,
    reset_correlation_id,
    set_correlation_id,
)

logger = get_logger(__name__)

SENSITIVE_HEADER_PATTERNS = [
    "authorization",
    "api-key",
    "apikey",
    "x-api-key",
    "api_key",
    "cookie",
]

_MAX_REQUEST_ID_LENGTH = 128


def redact_sensitive_headers(headers: dict[str, str]) -> dict[str, str]:
    """Return a copy with credential-bearing header values replaced."""
    redacted = {}
    for key, value in headers.items():
        key_lower = key.lower()
        is_sensitive = any(pattern in key_lower for pattern in SENSITIVE_HEADER_PATTERNS)
        redacted[key] = "[REDACTED]" if is_sensitive else value
    return redacted


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Per-request id, correlation logging and last-resort error handling.

    An inbound X-Request-ID is reused when it is short enough, otherwise a
    uuid4 is generated. The id is echoed on the response.
    """

    def __init__(self, app, exclude_paths: tuple[str, ...] = ("/metrics",)) -> None:
        super().__init__(app)
        self.exclude_paths = exclude_paths

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        inbound = request.headers.get(REQUEST_ID_HEADER, "")
        request_id = inbound if 0 < len(inbound) <= _MAX_REQUEST_ID_LENGTH else str(uuid.uuid4())
        request.state.request_id = request_id
        token = set_correlation_id(request_id)
        start_time = time.perf_counter()

        logger.debug(
            "request_started",
            method=request.method,
            path=request.url.path,
            headers=redact_sensitive_headers(dict(request.headers)),
        )
        try:
            try:
                response = await call_next(request)
            except Exception as e:
                response = internal_error_response(request, e)

            duration_ms = (time.perf_counter() - start_time) * 1000
            response.headers[REQUEST_ID_HEADER] = request_id
            if request.url.path.rstrip("/") not in self.exclude_paths:
                log = logger.warning if response.status_code >= 400 else logger.info
                log(
                    "request_completed",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 2),
                )
            return response
        finally:
            reset_correlation_id(token)
