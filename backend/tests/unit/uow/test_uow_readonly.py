"""Unit tests for SQLAlchemyReadOnlyUnitOfWork write guards."""

from __future__ import annotations

import pytest
from sqlalchemy import text
from surveyadmin.models import Survey
from surveyadmin.uow import SQLAlchemyReadOnlyUnitOfWork
from tests.factories.survey import SurveyFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_reads_are_allowed(self, db, session):
        survey = SurveyFactory()

        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            assert uow.surveys.get(survey.id) is survey

    def test_orm_flush_is_blocked(self, db, session):
        with pytest.raises(RuntimeError, match="ORM flush blocked"):
            with SQLAlchemyReadOnlyUnitOfWork() as uow:
                uow.session.add(Survey(name="blocked"))
                uow.session.flush()

    def test_raw_write_statements_are_blocked(self, db, session):
        with pytest.raises(RuntimeError, match="SQL statement blocked: DELETE"):
            with SQLAlchemyReadOnlyUnitOfWork() as uow:
                uow.session.execute(text("DELETE FROM surveys"))

    def test_commit_is_refused(self, db, session):
        with pytest.raises(RuntimeError, match="does not allow commit"):
            with SQLAlchemyReadOnlyUnitOfWork() as uow:
                uow.commit()

    def test_guards_are_removed_on_exit(self, db, session):
        with SQLAlchemyReadOnlyUnitOfWork():
            pass

        session.add(Survey(name="after-readonly"))
        session.flush()
