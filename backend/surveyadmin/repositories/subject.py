"""Subject repository implementing persistence-only operations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from sqlalchemy import Select, select
from sqlalchemy.orm import InstrumentedAttribute, joinedload

from surveyadmin.models.subject import ExcludedXid, Subject
from surveyadmin.repositories.base import BaseRepository


class SubjectRepository(BaseRepository[Subject]):
    """Persist :class:`Subject` rows and expose natural-key lookups.

    The respondent (and therefore the token) is joined eagerly since every
    read path returns it.
    """

    model = Subject

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {
            "id": self.model.id,
            "created_at": self.model.created_at,
            "last_name": self.model.last_name,
            "first_name": self.model.first_name,
            "xid": self.model.xid,
        }

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {
            "id": self.model.id,
            "department_id": self.model.department_id,
            "survey_id": self.model.survey_id,
            "xid": self.model.xid,
        }

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        return stmt.options(joinedload(self.model.respondent))

    def get_by_xid_and_department(self, xid: str, department_id: int) -> Subject | None:
        """
        Find a subject by its external id within a department.

        :param xid: External identifier (already trimmed).
        :type xid: str
        :param department_id: Owning department.
        :type department_id: int
        :returns: Subject or ``None``.
        :rtype: Subject | None
        """
        stmt: Select[Any] = select(self.model).where(
            self.model.xid == xid, self.model.department_id == department_id
        )
        stmt = self._default_eagerload(stmt)
        return cast(Subject | None, self.session.execute(stmt).scalars().first())


class ExcludedXidRepository(BaseRepository[ExcludedXid]):
    """Lookups against the per-department exclusion list."""

    model = ExcludedXid

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {"xid": self.model.xid, "department_id": self.model.department_id}

    def is_excluded(self, xid: str, department_id: int) -> bool:
        return self.find_one(xid=xid, department_id=department_id) is not None
