# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Error taxonomy shared by every service.

Services raise one of the ``AppError`` subclasses below and never let a
lower-layer exception escape.  ``main.py`` turns them into JSON responses of
the form ``{"error": ..., "kind": ...}`` with the matching status code.
"""

import functools
import re
from typing import Dict, Iterable, Optional

from fastapi import status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.logger import logger


class AppError(Exception):
    """Base class for every error a service reports to its caller."""

    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind}


class ValidationError(AppError):
    """Malformed or out-of-range input.  Carries a field → message map."""

    kind = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, details: Dict[str, str], message: Optional[str] = None):
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["details"] = self.details
        return body


class BadRequestError(AppError):
    kind = "bad_request"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class UnauthorizedError(AppError):
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(AppError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    """A write would break a uniqueness constraint.  ``field`` names it."""

    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.field:
            body["field"] = self.field
        return body


class InternalError(AppError):
    pass


# ---------------------------------------------------------------------------
# Service-boundary guard
# ---------------------------------------------------------------------------


def service_operation(name: str):
    """
    Decorator for service functions taking ``db`` as first argument.

    ``AppError`` passes through untouched.  Any ``SQLAlchemyError`` rolls the
    session back, is logged with its traceback, and is re-raised as
    ``InternalError`` so no driver detail reaches the client.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(db, *args, **kwargs):
            try:
                return func(db, *args, **kwargs)
            except AppError:
                raise
            except SQLAlchemyError as exc:
                db.rollback()
                logger.exception("Database failure during %s", name)
                raise InternalError() from exc

        return wrapper

    return decorator


# Where each driver names the violated key.  MySQL and PostgreSQL report the
# index name (ix_<table>_<column>), SQLite the qualified column list.  The
# duplicate value itself is never inspected.
_KEY_PATTERNS = (
    re.compile(r"for key '([^']+)'"),
    re.compile(r"unique constraint \"([^\"]+)\""),
    re.compile(r"UNIQUE constraint failed: ([\w., ]+)"),
)


def conflicting_column(driver_message: str, columns: Iterable[str]) -> Optional[str]:
    """Return the first of *columns* whose unique key is named in *driver_message*."""
    key = None
    for pattern in _KEY_PATTERNS:
        match = pattern.search(driver_message)
        if match:
            key = match.group(1)
            break
    if key is None:
        return None

    names = [part.rsplit(".", 1)[-1] for part in re.split(r"[,\s]+", key) if part]
    for column in columns:
        if any(name == column or name.endswith("_" + column) for name in names):
            return column
    return None


def _write_or_conflict(write, db, unique_fields: Dict[str, str]) -> None:
    try:
        write()
    except IntegrityError as exc:
        db.rollback()
        text = str(exc.orig)
        logger.warning("Unique constraint violated on write: %s", text)
        column = conflicting_column(text, unique_fields)
        if column is not None:
            raise ConflictError(unique_fields[column], field=column) from exc
        raise ConflictError("Record conflicts with an existing one") from exc


def commit_or_conflict(db, unique_fields: Dict[str, str]) -> None:
    """
    Commit *db*.  A unique-constraint violation raised by the database is
    rolled back and reported as ``ConflictError``.

    The pre-checks in the services only give a friendlier message; two
    requests racing on the same value are caught here.  *unique_fields* maps
    column name → conflict message, in the order they are matched against
    the driver's error text.
    """
    _write_or_conflict(db.commit, db, unique_fields)


def flush_or_conflict(db, unique_fields: Dict[str, str]) -> None:
    """Same as :func:`commit_or_conflict` for a flush (id needed before commit)."""
    _write_or_conflict(db.flush, db, unique_fields)
