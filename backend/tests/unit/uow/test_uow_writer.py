"""Unit tests for SQLAlchemyUnitOfWork (writer), using factories."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError
from surveyadmin.models import Respondent, Survey
from surveyadmin.uow import SQLAlchemyUnitOfWork
from tests.factories.subject import RespondentFactory
from tests.factories.survey import SurveyFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, db, session):
        """
        GIVEN a writer UoW
        WHEN a survey is added inside the context and the block exits cleanly
        THEN the transaction is committed and the row is visible afterwards.
        """
        initial = session.query(Survey).count()

        with SQLAlchemyUnitOfWork() as uow:
            uow.surveys.add(SurveyFactory.build())

        assert session.query(Survey).count() == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, db, session):
        initial = session.query(Survey).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            uow.surveys.add(SurveyFactory.build())
            raise RuntimeError("boom")

        assert session.query(Survey).count() == initial

    def test_savepoint_discards_only_inner_work(self, db, session):
        """
        GIVEN a writer UoW with one valid insert
        WHEN a nested savepoint hits a unique violation
        THEN only the savepoint is rolled back and the outer insert commits.
        """
        held = RespondentFactory(token="HELD")
        session.commit()
        survey_id = held.survey_id

        with SQLAlchemyUnitOfWork() as uow:
            uow.respondents.add(Respondent(survey_id=survey_id, token="KEEP"))
            with pytest.raises(IntegrityError), uow.savepoint():
                uow.respondents.add(Respondent(survey_id=survey_id, token="HELD"))

        tokens = {
            r.token for r in session.query(Respondent).filter_by(survey_id=survey_id).all()
        }
        assert tokens == {"HELD", "KEEP"}
