# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Domain exceptions shared by repositories, services and routers.

Repositories never leak driver messages: they log the original exception and
raise one of these with a generic message, chaining the cause with
``raise ... from exc``.  ``main.py`` maps every ``AppError`` to a JSON
``{"detail": message}`` response carrying ``status_code``.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class – carries an HTTP status and optional context."""

    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.cause = cause
        self.context = context
        super().__init__(message)


class ValidationError(AppError):
    """Caller supplied something unusable (empty command, bad shape …)."""

    status_code = 400


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Uniqueness violated, e.g. a duplicate connection or tag name."""

    status_code = 409


class StorageError(AppError):
    """Wraps any fault raised by the database engine."""

    status_code = 500
