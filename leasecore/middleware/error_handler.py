"""Error handling for consistent error responses."""
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from leasecore.exceptions import (
    IllegalTransitionError,
    LeaseCoreError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order; subclasses inherit their parent's status
STATUS_CODE_MAP = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (IllegalTransitionError, status.HTTP_409_CONFLICT),
)


def status_code_for(exc: LeaseCoreError) -> int:
    for exc_type, status_code in STATUS_CODE_MAP:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(
    code: str,
    message: str,
    details: List[Dict[str, Any]],
    request_id: Optional[str],
) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": request_id,
        }
    }


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


async def leasecore_exception_handler(request: Request, exc: LeaseCoreError) -> JSONResponse:
    """
    Handle leasecore exceptions raised from route handlers.

    Client errors (4xx) are never converted to 500.
    """
    request_id = _request_id(request)
    status_code = status_code_for(exc)

    log_level = logging.WARNING if status_code < 500 else logging.ERROR
    logger.log(
        log_level,
        f"{exc.code} [request_id={request_id}]: {exc.message}",
        extra={"request_id": request_id, "error_code": exc.code, "status_code": status_code},
    )

    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.code, exc.message, exc.details, request_id),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle FastAPI request validation errors."""
    request_id = _request_id(request)

    details = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", []))
        details.append({"field": field, "issue": error.get("msg", "Invalid value")})

    logger.warning(
        f"Validation error [request_id={request_id}]: {details}",
        extra={"request_id": request_id},
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("VALIDATION_ERROR", "Request validation failed", details, request_id),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Convert HTTPException to the standard error format, preserving its status code."""
    request_id = _request_id(request)
    detail = exc.detail

    details: List[Dict[str, Any]] = []
    if isinstance(detail, dict):
        code = detail.get("code", "HTTP_ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        code = "HTTP_ERROR"
        message = str(detail) if detail else "An error occurred"

    log_level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(
        log_level,
        f"{code} [request_id={request_id}]: {message} (status={exc.status_code})",
        extra={"request_id": request_id, "error_code": code, "status_code": exc.status_code},
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(code, message, details, request_id),
        headers=getattr(exc, "headers", None),
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Last-resort handler for exceptions that escape the route handlers.

    Unhandled exceptions are logged with their traceback and returned as a
    generic 500 without internal details.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        try:
            return await call_next(request)
        except LeaseCoreError as exc:
            return await leasecore_exception_handler(request, exc)
        except Exception as exc:
            request_id = _request_id(request)
            logger.error(
                f"Unhandled exception [request_id={request_id}]: {type(exc).__name__}: {str(exc)}",
                exc_info=True,
                extra={"request_id": request_id},
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=error_body(
                    "INTERNAL_SERVER_ERROR", "An unexpected error occurred", [], request_id
                ),
            )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LeaseCoreError, leasecore_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
