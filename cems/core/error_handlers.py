# cems/core/error_handlers.py
"""
Exception handlers that render every failure as the standard envelope:

    {"success": false, "message": "...", "code": "...", ["errors": [...]]}

Internal errors are logged with their traceback and surfaced as a generic 500.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from cems.core.exceptions import AppError, ErrorCode, ValidationFailedError

logger = logging.getLogger(__name__)


def _envelope(status_code: int, message: str, code: str, **extra) -> JSONResponse:
    content = {"success": False, "message": message, "code": code}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle structured application errors"""
    log = logger.warning if exc.status_code >= 500 else logger.info
    log(
        f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}"
    )
    extra = {}
    if isinstance(exc, ValidationFailedError):
        extra["errors"] = exc.errors
    return _envelope(exc.status_code, exc.message, exc.code, **extra)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI validation errors"""
    errors = []
    for err in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in err["loc"] if loc != "body"),
                "message": err["msg"],
                "type": err["type"],
            }
        )

    logger.info(f"Validation error on {request.method} {request.url.path}: {errors}")
    return _envelope(400, "Validation failed", ErrorCode.VALIDATION, errors=errors)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    code = {
        401: "unauthorized",
        403: ErrorCode.FORBIDDEN,
        404: ErrorCode.NOT_FOUND,
    }.get(exc.status_code, "http_error")
    response = _envelope(exc.status_code, str(exc.detail), code)
    if getattr(exc, "headers", None):
        response.headers.update(exc.headers)
    return response


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit exceeded on {request.url.path}: {exc.detail}")
    return _envelope(429, f"Too many requests: {exc.detail}", "rate_limited")


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Don't expose internal details to the caller
    logger.critical(
        f"Unexpected error on {request.method} {request.url.path}: {type(exc).__name__}",
        exc_info=exc,
    )
    return _envelope(500, "Internal server error", ErrorCode.INTERNAL)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
