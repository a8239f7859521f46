"""Survey and department repositories (read-mostly reference data)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import InstrumentedAttribute

from surveyadmin.models.survey import Department, Survey
from surveyadmin.repositories.base import BaseRepository


class SurveyRepository(BaseRepository[Survey]):
    model = Survey

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {"name": self.model.name}


class DepartmentRepository(BaseRepository[Department]):
    model = Department

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {"name": self.model.name, "code": self.model.code}
