"""
Boundary Error Handling

The single place where failures become HTTP responses. Every error body has
the shape {"error": {type, message, code, details?, traceId}}, where traceId
is the request id.
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ai_gateway.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    GatewayError,
    GatewayValidationError,
    InternalError,
    NotFoundError,
    RateLimitError,
)
from ai_gateway.models.responses import ErrorBody, ErrorEnvelope
from ai_gateway.observability.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def request_id_from_request(request: Request) -> str:
    state_id = getattr(request.state, "request_id", None)
    return state_id or request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())


def error_response(exc: GatewayError, request_id: str) -> JSONResponse:
    headers = {REQUEST_ID_HEADER: request_id}
    if isinstance(exc, RateLimitError):
        headers["Retry-After"] = str(exc.retry_after)
        headers["X-RateLimit-Limit"] = str(exc.limit)
        headers["X-RateLimit-Remaining"] = "0"
        headers["X-RateLimit-Reset"] = str(exc.retry_after)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorEnvelope(error=ErrorBody(**exc.to_dict(request_id))).model_dump(
            exclude_unset=True
        ),
        headers=headers,
    )


def _log_gateway_error(request: Request, exc: GatewayError) -> None:
    fields = {
        "path": request.url.path,
        "status_code": exc.status_code,
        "error_type": exc.error_type,
        "code": exc.code,
    }
    if exc.status_code >= 500:
        logger.error("request_failed", message=exc.message, **fields)
    else:
        logger.info("request_rejected", **fields)


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    _log_gateway_error(request, exc)
    return error_response(exc, request_id_from_request(request))


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {
            "path": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "invalid value"),
        }
        for err in exc.errors()
    ]
    error = GatewayValidationError("Invalid request body", details=details)
    _log_gateway_error(request, error)
    return error_response(error, request_id_from_request(request))


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Routing-level failures (unknown path, wrong method) mapped into the taxonomy."""
    error: GatewayError
    if exc.status_code == 404:
        error = NotFoundError(f"Route not found: {request.method} {request.url.path}")
    elif exc.status_code == 405:
        error = NotFoundError(f"Method not allowed: {request.method} {request.url.path}")
    elif exc.status_code == 401:
        error = AuthenticationError(str(exc.detail))
    elif exc.status_code == 403:
        error = AuthorizationError(str(exc.detail))
    elif 400 <= exc.status_code < 500:
        error = GatewayValidationError(str(exc.detail))
    else:
        error = InternalError()
    _log_gateway_error(request, error)
    return error_response(error, request_id_from_request(request))


def internal_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Log an unrecognized failure in full; answer with a generic message only."""
    request_id = request_id_from_request(request)
    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return error_response(InternalError(), request_id)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
