"""
Global exception handlers.

Every failure leaves the API in the same envelope shape as a success:
{status, message, data: null, error}. Internal exception detail is logged,
never returned.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import AppError
from app.schemas.response import failure

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        logger.info(
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        headers = {"WWW-Authenticate": "Bearer"} if exc.http_status == status.HTTP_401_UNAUTHORIZED else None
        return JSONResponse(
            status_code=exc.http_status,
            content=failure(exc.http_status, exc.message, exc.to_error()),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=422,
            content=failure(
                422,
                "Invalid request data",
                field_errors(exc.errors()),
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse(
            status_code=exc.status_code,
            content=failure(exc.status_code, message, exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=failure(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "An unexpected error occurred",
                "INTERNAL_ERROR",
            ),
        )


def field_errors(errors) -> list:
    """Flatten pydantic errors into [{field, message, type}] entries."""
    return [
        {
            # Drop the leading "body"/"query" location segment
            "field": ".".join(str(loc) for loc in e["loc"][1:]) or str(e["loc"][0]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in errors
    ]
