"""Respondent model: the per-survey identity holding the access token."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from surveyadmin.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .subject import Subject
    from .survey import Survey

#: Storage-level arbiter of token uniqueness; the registrar retries on it.
TOKEN_UNIQUE_CONSTRAINT = "uq_respondents_survey_token"


class Respondent(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Survey participation identity.

    Created once per subject with a fresh token and never modified afterwards
    except for the lifecycle fields (``logins``, ``first_access_at``,
    ``finalized_at``), which the survey front end maintains.

    Fields
    ------
    survey_id : int
        FK to :class:`Survey`.
    token : str
        Short access token, unique within the survey.
    active : bool
        Inactive respondents cannot log in.
    """

    __tablename__ = "respondents"

    survey_id: Mapped[int] = mapped_column(ForeignKey("surveys.id"), nullable=False)
    token: Mapped[str] = mapped_column(String(64), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    logins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    first_access_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    finalized_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    survey: Mapped[Survey] = relationship("Survey", lazy="joined")
    subject: Mapped[Subject | None] = relationship(
        "Subject", back_populates="respondent", uselist=False
    )

    __table_args__ = (
        UniqueConstraint("survey_id", "token", name=TOKEN_UNIQUE_CONSTRAINT),
        Index("ix_respondents_token", "token"),
    )

    @property
    def elapsed_time(self) -> str:
        """Return ``HH:MM:SS`` between first access and finalization."""
        if self.first_access_at is None or self.finalized_at is None:
            return "Not calculated"
        seconds = int((self.finalized_at - self.first_access_at).total_seconds())
        hours, rest = divmod(seconds, 3600)
        minutes, secs = divmod(rest, 60)
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
