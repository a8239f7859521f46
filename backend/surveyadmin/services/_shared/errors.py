"""
Service-level exceptions for registration, token issuance and imports.

These exceptions never depend on Flask or HTTP. Translation to RFC 7807
responses happens in ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError names a specific constraint.

    PostgreSQL includes the constraint name in the driver message.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


def is_unique_violation(
    exc: IntegrityError,
    constraint_name: str,
    columns: Iterable[str] = (),
) -> bool:
    """
    Check whether ``exc`` is a unique violation of ``constraint_name``.

    SQLite reports ``UNIQUE constraint failed: table.col1, table.col2``
    without the constraint name, so the column names are matched instead.

    :param exc: Error raised during flush/commit.
    :param constraint_name: Named constraint, e.g. ``uq_respondents_survey_token``.
    :param columns: Qualified columns of the constraint, e.g. ``respondents.token``.
    """
    if violates(exc, constraint_name):
        return True
    message = str(exc.orig).lower() if exc.orig else ""
    cols = [c.lower() for c in columns]
    return "unique" in message and bool(cols) and all(c in message for c in cols)


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    These are *not* HTTP errors; the API layer translates them.
    """


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when a referenced entity does not exist.

    :param entity: Entity name (e.g., "Survey").
    :param key: Identifier or search key.
    :param message: Optional full message replacing the default wording.
    """

    entity: str
    key: str | int
    message: str | None = None

    def __str__(self) -> str:
        return self.message or f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "Subject").
    :param detail: Short human-readable explanation.
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class TokenGenerationError(ServiceError):
    """Raised when no unique access token could be issued."""


class InvalidImportError(ServiceError):
    """Raised when an import stream cannot be read at all."""
