"""
Application error type and database error translation.

:class:`AppError` is the only exception type the HTTP layer expects to
see.  Services wrap their database work in :func:`translate_errors`,
which decodes a raw driver/ORM exception once via
:func:`classify_db_error` and re-raises an ``AppError`` whose status
code reflects the kind of failure.
"""
from __future__ import annotations

import enum
import logging
from contextlib import ContextDecorator
from dataclasses import dataclass
from typing import Iterable, Optional

from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError, IntegrityError
from django.db.models import ProtectedError, RestrictedError
from rest_framework import status
from rest_framework.exceptions import APIException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldIssue:
    path: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {'path': self.path, 'message': self.message}


class AppError(APIException):
    """An expected failure with an HTTP status and a client-safe message.

    ``category`` is derived from the status code (``"fail"`` for 4xx,
    ``"error"`` otherwise) and cannot be set on its own.  Errors raised
    for business rules are operational; the translator marks unexpected
    failures with ``is_operational=False`` so the formatter hides them
    in production.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        field_errors: Optional[Iterable[FieldIssue]] = None,
        *,
        is_operational: bool = True,
    ) -> None:
        if not message or not str(message).strip():
            raise ValueError('AppError requires a non-empty message')
        if not isinstance(status_code, int) or not 100 <= status_code <= 599:
            raise ValueError(f'invalid HTTP status code: {status_code!r}')
        super().__init__(detail=message)
        self._message = str(message)
        self._status_code = status_code
        self._field_errors = tuple(field_errors) if field_errors is not None else None
        self._is_operational = is_operational

    # APIException reads ``status_code`` as an attribute; expose it read-only.
    @property
    def status_code(self) -> int:  # type: ignore[override]
        return self._status_code

    @property
    def message(self) -> str:
        return self._message

    @property
    def category(self) -> str:
        return 'fail' if 400 <= self._status_code < 500 else 'error'

    @property
    def is_operational(self) -> bool:
        return self._is_operational

    @property
    def field_errors(self) -> Optional[tuple[FieldIssue, ...]]:
        return self._field_errors

    def __str__(self) -> str:
        return self._message

    def __repr__(self) -> str:
        return f'AppError({self._message!r}, {self._status_code})'


# ---------------------------------------------------------------------------
# Database error classification
# ---------------------------------------------------------------------------

class DbFailureKind(enum.Enum):
    UNIQUE_VIOLATION = 'unique_violation'
    FOREIGN_KEY_VIOLATION = 'foreign_key_violation'
    NOT_FOUND = 'not_found'
    OTHER = 'other'


@dataclass(frozen=True)
class DbFailure:
    kind: DbFailureKind
    detail: str = ''


# SQLSTATE (PostgreSQL) and errno (MySQL) values for constraint failures.
_UNIQUE_CODES = {'23505', 1062, 1586}
_FOREIGN_KEY_CODES = {'23503', 1216, 1217, 1451, 1452}


def _driver_code(exc: BaseException):
    cause = exc.__cause__ or exc.__context__
    for candidate in (cause, exc):
        if candidate is None:
            continue
        code = getattr(candidate, 'pgcode', None) or getattr(candidate, 'sqlstate', None)
        if code:
            return code
        args = getattr(candidate, 'args', ())
        if args and isinstance(args[0], int):
            return args[0]
    return None


def classify_db_error(exc: BaseException) -> DbFailure:
    """Decode a database exception into a :class:`DbFailure`.

    This is the single place that knows about driver specific error
    shapes.  Everything else matches on :class:`DbFailureKind`.
    """
    detail = str(exc)
    if isinstance(exc, ObjectDoesNotExist):
        return DbFailure(DbFailureKind.NOT_FOUND, detail)
    if isinstance(exc, (ProtectedError, RestrictedError)):
        return DbFailure(DbFailureKind.FOREIGN_KEY_VIOLATION, detail)
    if isinstance(exc, IntegrityError):
        code = _driver_code(exc)
        if code in _UNIQUE_CODES:
            return DbFailure(DbFailureKind.UNIQUE_VIOLATION, detail)
        if code in _FOREIGN_KEY_CODES:
            return DbFailure(DbFailureKind.FOREIGN_KEY_VIOLATION, detail)
        lowered = detail.lower()
        # sqlite only reports a message
        if 'unique' in lowered or 'duplicate' in lowered:
            return DbFailure(DbFailureKind.UNIQUE_VIOLATION, detail)
        if 'foreign key' in lowered:
            return DbFailure(DbFailureKind.FOREIGN_KEY_VIOLATION, detail)
        return DbFailure(DbFailureKind.OTHER, detail)
    if isinstance(exc, DatabaseError) and 'did not affect any rows' in detail:
        # Model.save(update_fields=...) / force_update on a row deleted meanwhile
        return DbFailure(DbFailureKind.NOT_FOUND, detail)
    return DbFailure(DbFailureKind.OTHER, detail)


# ---------------------------------------------------------------------------
# Translator
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorMessages:
    """Client-facing messages for one entity, used by :func:`translate_errors`."""
    entity: str
    conflict: str = ''
    not_found: str = ''
    invalid_reference: str = ''
    in_use: str = ''

    def __post_init__(self) -> None:
        name = self.entity
        defaults = {
            'conflict': f'{name} already exists',
            'not_found': f'{name} not found',
            'invalid_reference': f'{name} references a related record that does not exist',
            'in_use': f'{name} is still referenced by other records',
        }
        for attr, text in defaults.items():
            if not getattr(self, attr):
                object.__setattr__(self, attr, text)


class translate_errors(ContextDecorator):
    """Re-raise anything escaping the block as an :class:`AppError`.

    Usable as ``with translate_errors(msgs, 'update'):`` or as a
    decorator.  ``deleting=True`` turns a foreign key failure into 409
    (the row is still referenced) instead of 400.
    """

    def __init__(self, messages: ErrorMessages, action: str, *, deleting: bool = False) -> None:
        self.messages = messages
        self.action = action
        self.deleting = deleting

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc is None or not isinstance(exc, Exception):
            return False
        if isinstance(exc, APIException):
            # AppError and other already-typed HTTP errors pass through untouched
            return False
        raise self.translate(exc) from exc

    def translate(self, exc: BaseException) -> AppError:
        msgs = self.messages
        failure = classify_db_error(exc)
        if failure.kind is DbFailureKind.UNIQUE_VIOLATION:
            return AppError(msgs.conflict, status.HTTP_409_CONFLICT)
        if failure.kind is DbFailureKind.FOREIGN_KEY_VIOLATION:
            if self.deleting:
                return AppError(msgs.in_use, status.HTTP_409_CONFLICT)
            return AppError(msgs.invalid_reference, status.HTTP_400_BAD_REQUEST)
        if failure.kind is DbFailureKind.NOT_FOUND:
            return AppError(msgs.not_found, status.HTTP_404_NOT_FOUND)
        logger.error('failed to %s %s', self.action, msgs.entity, exc_info=exc)
        return AppError(
            f'Failed to {self.action} the {msgs.entity.lower()}',
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            is_operational=False,
        )

    def _recreate_cm(self):
        return self


def not_found(messages: ErrorMessages) -> AppError:
    return AppError(messages.not_found, status.HTTP_404_NOT_FOUND)


def get_or_404(queryset, messages: ErrorMessages, **lookup):
    """Fetch one row or raise the entity's 404 ``AppError``."""
    obj = queryset.filter(**lookup).first()
    if obj is None:
        raise not_found(messages)
    return obj


__all__ = [
    'AppError',
    'FieldIssue',
    'DbFailure',
    'DbFailureKind',
    'ErrorMessages',
    'classify_db_error',
    'translate_errors',
    'get_or_404',
    'not_found',
]
