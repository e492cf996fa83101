"""Exception handlers mapping storefront errors to HTTP responses.

Every error body carries ``success: false`` and a human-readable ``message``.
"""

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.exceptions import (
    ConfigError,
    GatewayError,
    InvalidSignatureError,
    NotFoundError,
)

logger = structlog.get_logger(__name__)


def _first_message(messages) -> str:
    """Pull the first human-readable message out of a protean error payload."""
    if isinstance(messages, dict):
        for value in messages.values():
            if isinstance(value, (list, tuple)) and value:
                return str(value[0])
            if value:
                return str(value)
    if isinstance(messages, (list, tuple)) and messages:
        return str(messages[0])
    return str(messages) if messages else "Invalid request"


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    content = {"success": False, "message": message}
    content.update({key: value for key, value in extra.items() if value is not None})
    return JSONResponse(status_code=status_code, content=content)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    messages = getattr(exc, "messages", None)
    return _error(400, _first_message(messages), errors=messages if isinstance(messages, dict) else None)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return _error(400, message)


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    message = exc.message if isinstance(exc, NotFoundError) else "Order not found"
    return _error(404, message)


async def invalid_signature_handler(request: Request, exc: InvalidSignatureError) -> JSONResponse:
    return _error(400, exc.message)


async def config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
    logger.error("Payment service configuration error", path=request.url.path, error=exc.message)
    return _error(500, "Payment service configuration error", details=exc.message)


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    logger.error(
        "Payment gateway error",
        path=request.url.path,
        status=exc.status_code,
        code=exc.code,
        error=exc.message,
    )
    return _error(exc.status_code, exc.message, details=exc.details, code=exc.code)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", path=request.url.path, error_type=type(exc).__name__, exc_info=exc)
    return _error(500, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(InvalidSignatureError, invalid_signature_handler)
    app.add_exception_handler(ConfigError, config_error_handler)
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
