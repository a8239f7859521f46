"""Survey and Department reference models."""

from __future__ import annotations

from sqlalchemy import Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from surveyadmin.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class Survey(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A survey instrument participants are registered into.

    Respondent tokens are unique per survey, not globally.
    """

    __tablename__ = "surveys"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (UniqueConstraint("name", name="uq_surveys_name"),)


class Department(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Organizational unit owning subjects and message templates.

    Fields
    ------
    name : str
        Display name.
    code : str | None
        Short code used by upstream systems.
    default_message_ids : str | None
        Comma-separated :class:`MessageTemplate` ids rendered for every new
        subject of this department. Blank means no messages are created.
    """

    __tablename__ = "departments"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    default_message_ids: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (UniqueConstraint("name", name="uq_departments_name"),)
