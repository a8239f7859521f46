"""
DTOs for SubjectRegistrar.

Registration never raises for business failures: callers receive a
:class:`RegistrationResult` carrying either the registered subject or a
classified error, so batch callers can keep going.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

# --------------------------------------------------------------------------- #
# Enums
# --------------------------------------------------------------------------- #


class SubjectStatus(str, Enum):
    """Outcome of a successful registration call."""

    NEW = "new"
    EXISTING = "existing"
    EXCLUDED = "excluded"

    @property
    def label(self) -> str:
        return f"{self.value.capitalize()} Subject"


class ErrorKind(str, Enum):
    """Failure classes; ``TOKEN_GENERATION`` is a system failure, not a bad request."""

    VALIDATION = "validation"
    REFERENCE = "reference"
    CONFLICT = "conflict"
    TOKEN_GENERATION = "token_generation"


# --------------------------------------------------------------------------- #
# Input
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegistrationRequest:
    """
    One participant to register.

    :param survey_id: Survey the respondent token is issued for.
    :type survey_id: int
    :param department_id: Owning department.
    :type department_id: int
    :param first_name: Required, non-blank.
    :type first_name: str
    :param last_name: Required, non-blank.
    :type last_name: str
    :param middle_name: Optional.
    :type middle_name: str | None
    :param dob: Optional date of birth.
    :type dob: date | None
    :param email: Contact email; email or phone must be present.
    :type email: str | None
    :param phone: Contact phone (``###-###-####``).
    :type phone: str | None
    :param xid: External id, unique per department when present.
    :type xid: str | None
    """

    survey_id: int
    department_id: int
    first_name: str
    last_name: str
    middle_name: str | None = None
    dob: date | None = None
    email: str | None = None
    phone: str | None = None
    xid: str | None = None

    @property
    def normalized_xid(self) -> str | None:
        return (self.xid or "").strip() or None

    @property
    def has_contact(self) -> bool:
        return bool((self.email or "").strip() or (self.phone or "").strip())


# --------------------------------------------------------------------------- #
# Output
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisteredSubject:
    """
    Snapshot of the subject a registration resolved to.

    ``subject_id``/``token`` are ``None`` for excluded xids.
    """

    status: SubjectStatus
    survey_id: int
    department_id: int
    xid: str | None = None
    subject_id: int | None = None
    respondent_id: int | None = None
    token: str | None = None


@dataclass(frozen=True, slots=True)
class RegistrationResult:
    """Success-or-error value returned by :meth:`SubjectRegistrar.register`."""

    subject: RegisteredSubject | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @property
    def status(self) -> SubjectStatus | None:
        return self.subject.status if self.subject is not None else None

    @classmethod
    def success(cls, subject: RegisteredSubject) -> RegistrationResult:
        return cls(subject=subject)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> RegistrationResult:
        return cls(error=message, error_kind=kind)


@dataclass(slots=True)
class BatchRegistrationResult:
    """
    Aggregated outcome of :meth:`SubjectRegistrar.register_many`.

    :param statuses: Labels such as ``"New Subject: X1"``.
    :param errors: Labels such as ``"Error processing X1: <message>"``.
    :param results: Per-request results, in input order.
    """

    statuses: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    results: list[RegistrationResult] = field(default_factory=list)
