"""Middleware package for the leasecore API."""
from .error_handler import ErrorHandlerMiddleware, register_exception_handlers
from .request_id import RequestIDMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "RequestIDMiddleware",
    "register_exception_handlers",
]
