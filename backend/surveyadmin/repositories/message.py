"""Message template and outbound message repositories."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.orm import InstrumentedAttribute

from surveyadmin.models.message import Message, MessageTemplate
from surveyadmin.repositories.base import BaseRepository


class MessageTemplateRepository(BaseRepository[MessageTemplate]):
    model = MessageTemplate

    def get_many(self, ids: Iterable[int]) -> dict[int, MessageTemplate]:
        """
        Load templates by id in one query.

        :param ids: Template ids; duplicates are allowed.
        :type ids: Iterable[int]
        :returns: Mapping of id to template for the ids that exist.
        :rtype: dict[int, MessageTemplate]
        """
        wanted = set(ids)
        if not wanted:
            return {}
        stmt: Select[Any] = select(self.model).where(self.model.id.in_(wanted))
        return {t.id: t for t in self.session.execute(stmt).unique().scalars()}


class MessageRepository(BaseRepository[Message]):
    model = Message

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {"subject_id": self.model.subject_id}

    def list_for_subject(self, subject_id: int) -> list[Message]:
        stmt: Select[Any] = (
            select(self.model)
            .where(self.model.subject_id == subject_id)
            .order_by(self.model.id.asc())
        )
        return list(self.session.execute(stmt).scalars())
