"""Respondent repository: token lookups backing unique token issuance."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.orm import InstrumentedAttribute

from surveyadmin.models.respondent import Respondent
from surveyadmin.models.survey import Survey
from surveyadmin.repositories.base import BaseRepository


class RespondentRepository(BaseRepository[Respondent]):
    """Persist :class:`Respondent` rows and answer token-uniqueness queries."""

    model = Respondent

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {
            "survey_id": self.model.survey_id,
            "token": self.model.token,
            "active": self.model.active,
        }

    def find_survey(self, survey_id: int) -> Survey | None:
        """
        Load the survey a token is being issued for.

        :param survey_id: Survey primary key.
        :type survey_id: int
        :returns: Survey or ``None`` when it does not exist.
        :rtype: Survey | None
        """
        return self.session.get(Survey, survey_id)

    def token_exists(self, survey_id: int, token: str) -> bool:
        """
        Return ``True`` when a respondent of ``survey_id`` already holds ``token``.

        This is an optimization only; the ``(survey_id, token)`` unique
        constraint remains the final arbiter under concurrency.
        """
        stmt: Select[Any] = (
            select(func.count())
            .select_from(self.model)
            .where(self.model.survey_id == survey_id, self.model.token == token)
        )
        return int(self.session.execute(stmt).scalar_one()) > 0
