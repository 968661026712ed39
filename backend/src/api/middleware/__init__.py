"""FastAPI middleware for owner resolution and error handling."""

from .auth_middleware import OwnerContext, get_auth_service, get_owner_context
from .error_handlers import (
    http_exception_handler,
    internal_exception_handler,
    register_error_handlers,
    validation_exception_handler,
)

__all__ = [
    "OwnerContext",
    "get_auth_service",
    "get_owner_context",
    "register_error_handlers",
    "validation_exception_handler",
    "http_exception_handler",
    "internal_exception_handler",
]
