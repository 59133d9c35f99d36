"""Shared utilities package."""

from packages.shared.exceptions import (
    AppException,
    NotFoundError,
    app_exception_handler,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "app_exception_handler",
]
