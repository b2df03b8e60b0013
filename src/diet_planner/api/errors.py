"""Exception handlers that render errors in one response shape."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from diet_planner.errors import DietPlannerError

_logger = logging.getLogger(__name__)

_HTTP_CODES = {
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def error_response(
    message: str,
    code: str,
    status_code: int,
    details: dict[str, object] | None = None,
) -> JSONResponse:
    """Build the standard error body."""
    return JSONResponse(
        status_code=status_code,
        content={
            "message": message,
            "error": {"code": code, "details": details or {}},
        },
    )


async def _planner_error_handler(
    request: Request, exc: DietPlannerError
) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        _logger.error(
            "Request failed: %s %s code=%s message=%s",
            request.method,
            request.url.path,
            exc.code,
            exc.message,
        )
    else:
        _logger.info(
            "Request rejected: %s %s code=%s",
            request.method,
            request.url.path,
            exc.code,
        )
    return error_response(exc.message, exc.code, exc.status_code, exc.details)


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    _logger.info(
        "Validation error on %s %s: %s", request.method, request.url.path, errors
    )
    return error_response(
        "Validation error",
        "VALIDATION_ERROR",
        status.HTTP_400_BAD_REQUEST,
        {"fields": errors},
    )


async def _http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(
        str(exc.detail),
        _HTTP_CODES.get(exc.status_code, "HTTP_ERROR"),
        exc.status_code,
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    _logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return error_response(
        "Internal server error",
        "INTERNAL_SERVER_ERROR",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all error handlers to the app."""
    app.add_exception_handler(
        DietPlannerError,
        _planner_error_handler,  # type: ignore[arg-type]
    )
    app.add_exception_handler(
        RequestValidationError,
        _validation_error_handler,  # type: ignore[arg-type]
    )
    app.add_exception_handler(
        StarletteHTTPException,
        _http_error_handler,  # type: ignore[arg-type]
    )
    app.add_exception_handler(Exception, _unhandled_error_handler)
