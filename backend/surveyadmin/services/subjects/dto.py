"""
DTOs for SubjectQueryService.

Framework-agnostic read models for the ``Subject`` aggregate; the token is
carried from the linked respondent.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from surveyadmin.services._shared.dto import PageMeta, PaginationIn


@dataclass(frozen=True, slots=True)
class SubjectListIn:
    """
    Listing input.

    Allowed filters: ``department_id``, ``survey_id``, ``xid``.
    Sort keys: ``id``, ``created_at``, ``last_name``, ``first_name``, ``xid``.
    """

    pagination: PaginationIn
    filters: dict[str, Any] | None = None
    with_total: bool = True


@dataclass(frozen=True, slots=True)
class SubjectOut:
    """Subject with its respondent token."""

    id: int
    xid: str | None
    survey_id: int
    department_id: int
    respondent_id: int
    token: str | None
    first_name: str
    last_name: str
    middle_name: str | None
    dob: date | None
    email: str | None
    phone: str | None
    created_at: datetime | None


@dataclass(frozen=True, slots=True)
class SubjectListOut:
    items: list[SubjectOut]
    meta: PageMeta
