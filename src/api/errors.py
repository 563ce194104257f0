"""
Exception handlers - uniform JSON error bodies.

Every error leaves the service as ``{"success": false, "message": ...}``:
HTTPExceptions raised by routes keep their status and detail,
request validation errors become 400 "Invalid input", and anything
unexpected becomes a logged 500.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INVALID_INPUT = "Invalid input"
SERVICE_UNAVAILABLE = "Service unavailable"
INTERNAL_ERROR = "Internal error"


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    """Build the standard failure body."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Field errors may echo input values, so only their locations are logged
    logger.info(
        "Rejected malformed request to %s: %s",
        request.url.path,
        [error.get("loc") for error in exc.errors()],
    )
    return error_response(status.HTTP_400_BAD_REQUEST, INVALID_INPUT)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)


def install_error_handlers(app: FastAPI) -> None:
    """Register the uniform error handlers on an application."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
