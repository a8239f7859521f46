"""Repository package exposing persistence-layer access for all models."""

from __future__ import annotations

from surveyadmin.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    apply_sorting,
    paginate_select,
)
from surveyadmin.repositories.message import (
    MessageRepository,
    MessageTemplateRepository,
)
from surveyadmin.repositories.respondent import RespondentRepository
from surveyadmin.repositories.subject import ExcludedXidRepository, SubjectRepository
from surveyadmin.repositories.survey import DepartmentRepository, SurveyRepository

__all__ = [
    "BaseRepository",
    "Page",
    "Pagination",
    "paginate_select",
    "apply_sorting",
    "DepartmentRepository",
    "ExcludedXidRepository",
    "MessageRepository",
    "MessageTemplateRepository",
    "RespondentRepository",
    "SubjectRepository",
    "SurveyRepository",
]
