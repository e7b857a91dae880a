"""
HTTP mapping of the error taxonomy.

    UnauthorizedError  401  {"message": ...} + WWW-Authenticate: Bearer
    ForbiddenError     403  {"message": ...}
    NotFoundError      404  {"message": ...}
    ValidationError    422  {"errors": [{message, type, path}, ...]}
    anything else      500  {"message": "Something went wrong"}

Detail messages of 401/403/404 stay in the logs; callers get the
generic message so "no token", "bad token" and "expired token" look
alike.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from private_booking.core.errors import (
    AppError,
    FieldError,
    UnauthorizedError,
    ValidationError,
)
from private_booking.integrations.sentry import capture_exception

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Something went wrong"

# Request parts FastAPI prefixes to validation locations
_LOCATION_PREFIXES = ("body", "query", "path", "header", "cookie")


def field_errors_from_request(exc: RequestValidationError) -> list[FieldError]:
    """Fold pydantic request errors into FieldError entries."""
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if len(loc) > 1 and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        error_type = error.get("type", "invalid")
        errors.append(FieldError(
            message=error.get("msg", "Invalid value"),
            type="required" if error_type == "missing" else error_type,
            path=".".join(loc) or "body",
        ))
    return errors


def validation_response(errors: list[FieldError]) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"errors": [e.model_dump() for e in errors]},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI app."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.info(f"Validation failed on {request.url.path}: {exc.message}")
        return validation_response(exc.errors)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = field_errors_from_request(exc)
        logger.info(f"Invalid request to {request.url.path}: {len(errors)} error(s)")
        return validation_response(errors)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
            capture_exception(exc, path=request.url.path)
            return JSONResponse(status_code=500, content={"message": SERVER_ERROR_MESSAGE})

        logger.info(f"{exc.status_code} on {request.url.path}: {exc.message}")
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": type(exc).default_message},
            headers=headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.url.path}: {type(exc).__name__}")
        capture_exception(exc, path=request.url.path)
        return JSONResponse(status_code=500, content={"message": SERVER_ERROR_MESSAGE})
