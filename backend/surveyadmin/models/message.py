"""Message types, department message templates, and outbound messages."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from surveyadmin.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .subject import Subject

TOKEN_PLACEHOLDER = "<TOKEN>"


class MessageType(PKMixin, ReprMixin, db.Model):
    """Delivery channel for a message (``EMAIL``, ``SMS``...)."""

    __tablename__ = "message_types"

    name: Mapped[str] = mapped_column(String(50), nullable=False)

    __table_args__ = (UniqueConstraint("name", name="uq_message_types_name"),)


class MessageTemplate(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Department-owned template rendered into a :class:`Message` at registration.

    ``message`` may contain the ``<TOKEN>`` placeholder, replaced with the
    respondent's access token.
    """

    __tablename__ = "message_templates"

    department_id: Mapped[int | None] = mapped_column(
        ForeignKey("departments.id", ondelete="CASCADE"), nullable=True
    )
    message_type_id: Mapped[int] = mapped_column(ForeignKey("message_types.id"), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False, default="text/html")

    message_type = relationship("MessageType", lazy="joined")

    def render(self, token: str) -> str:
        """Return the template body with the token placeholder substituted."""
        return (self.message or "").replace(TOKEN_PLACEHOLDER, token or "")


class Message(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Outbound notification queued for a subject.

    Rows are written at registration time; ``sent_at`` is filled later by the
    delivery job, which lives outside this service.
    """

    __tablename__ = "messages"

    subject_id: Mapped[int] = mapped_column(
        ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False
    )
    message_type_id: Mapped[int] = mapped_column(ForeignKey("message_types.id"), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False, default="text/html")
    subject_line: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    subject: Mapped[Subject] = relationship("Subject", back_populates="messages")
    message_type = relationship("MessageType")

    __table_args__ = (Index("ix_messages_unsent", "sent_at"),)
