"""Subject (participant personal data) and ExcludedXid models."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from surveyadmin.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .message import Message
    from .respondent import Respondent
    from .survey import Department

XID_UNIQUE_CONSTRAINT = "uq_subjects_xid_department"


class Subject(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Participant record holding direct PII.

    Always linked 1:1 to the :class:`Respondent` that was created for it in
    the same transaction. ``xid`` is the upstream (external) identifier and is
    unique per department when present.
    """

    __tablename__ = "subjects"

    xid: Mapped[str | None] = mapped_column(String(255), nullable=True)
    survey_id: Mapped[int] = mapped_column(ForeignKey("surveys.id"), nullable=False)
    department_id: Mapped[int] = mapped_column(ForeignKey("departments.id"), nullable=False)
    respondent_id: Mapped[int] = mapped_column(
        ForeignKey("respondents.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    respondent: Mapped[Respondent] = relationship(
        "Respondent", back_populates="subject", lazy="joined"
    )
    department: Mapped[Department] = relationship("Department")
    messages: Mapped[list[Message]] = relationship(
        "Message",
        back_populates="subject",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("xid", "department_id", name=XID_UNIQUE_CONSTRAINT),
        Index("ix_subjects_department_id", "department_id"),
        Index("ix_subjects_survey_id", "survey_id"),
    )

    @property
    def token(self) -> str | None:
        return self.respondent.token if self.respondent is not None else None

    @validates("first_name", "last_name")
    def _strip_required(self, key: str, value: str) -> str:
        return value.strip() if isinstance(value, str) else value

    @validates("middle_name", "email", "phone", "xid")
    def _blank_to_none(self, key: str, value: str | None) -> str | None:
        """Store optional text as ``NULL`` rather than empty strings."""
        if value is None:
            return None
        v = value.strip()
        return v or None


class ExcludedXid(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    External id that must never be registered for a department.

    Registration requests for an excluded ``(xid, department)`` pair are
    acknowledged as *excluded* and nothing is persisted.
    """

    __tablename__ = "excluded_xids"

    xid: Mapped[str] = mapped_column(String(255), nullable=False)
    department_id: Mapped[int] = mapped_column(ForeignKey("departments.id"), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint("xid", "department_id", name="uq_excluded_xids_xid_department"),
    )
