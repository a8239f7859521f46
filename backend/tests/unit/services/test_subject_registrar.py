"""
Unit tests for SubjectRegistrar.

Reference rows are committed (to the per-test outer transaction) before each
registration, so a unit-of-work rollback only discards the registration.
"""

from __future__ import annotations

import logging
from datetime import date

import pytest
from sqlalchemy import func, select
from surveyadmin.models import Message, Respondent, Subject
from surveyadmin.repositories import MessageRepository, RespondentRepository, SubjectRepository
from surveyadmin.services.registration.dto import (
    ErrorKind,
    RegistrationRequest,
    SubjectStatus,
)
from surveyadmin.services.registration.service import SubjectRegistrar
from tests.factories.subject import ExcludedXidFactory, RespondentFactory, SubjectFactory
from tests.factories.survey import DepartmentFactory, MessageTemplateFactory, SurveyFactory


class ScriptedGenerator:
    """Yield predetermined tokens, repeating the last one when exhausted."""

    def __init__(self, *tokens: str) -> None:
        self._tokens = list(tokens)

    def next(self) -> str:
        return self._tokens.pop(0) if len(self._tokens) > 1 else self._tokens[0]


def _count(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


class TestSubjectRegistrar:
    # -------------------------- Fixtures ---------------------------------- #

    @pytest.fixture()
    def refs(self, session):
        """Survey plus a department with two templates (committed)."""
        survey = SurveyFactory()
        department = DepartmentFactory()
        email = MessageTemplateFactory(department_id=department.id)
        sms = MessageTemplateFactory(
            department_id=department.id, message="Code: <TOKEN>", subject="SMS"
        )
        department.default_message_ids = f"{email.id}, {sms.id}"
        session.commit()
        return {
            "survey": survey,
            "department": department,
            "survey_id": survey.id,
            "department_id": department.id,
            "template_ids": (email.id, sms.id),
        }

    @pytest.fixture()
    def registrar(self) -> SubjectRegistrar:
        return SubjectRegistrar()

    def _request(self, refs, **overrides) -> RegistrationRequest:
        data = {
            "survey_id": refs["survey_id"],
            "department_id": refs["department_id"],
            "first_name": "Jane",
            "last_name": "Doe",
            "email": "jane@example.com",
            "xid": "X100",
        }
        data.update(overrides)
        return RegistrationRequest(**data)

    # -------------------------- New subjects ------------------------------ #

    def test_register_new_subject_creates_respondent_subject_and_messages(
        self, registrar, refs, session
    ):
        """
        GIVEN a valid request for an unknown xid
        WHEN it is registered
        THEN respondent, subject and one message per template are committed
        AND each message body carries the issued token.
        """
        result = registrar.register(self._request(refs))

        assert result.ok
        assert result.status is SubjectStatus.NEW
        registered = result.subject
        assert registered.xid == "X100"
        assert registered.subject_id is not None
        assert len(registered.token) == 9

        subject = SubjectRepository(session=session).get(registered.subject_id)
        assert subject.respondent.token == registered.token
        assert subject.respondent.survey_id == refs["survey_id"]
        assert subject.respondent.active is True

        messages = MessageRepository(session=session).list_for_subject(registered.subject_id)
        assert [m.body for m in messages] == [
            f"Use access code {registered.token} to start.",
            f"Code: {registered.token}",
        ]
        assert all("<TOKEN>" not in m.body for m in messages)

    def test_register_without_xid_always_creates(self, registrar, refs, session):
        first = registrar.register(self._request(refs, xid="   "))
        second = registrar.register(self._request(refs, xid=None))

        assert first.status is SubjectStatus.NEW
        assert second.status is SubjectStatus.NEW
        assert first.subject.subject_id != second.subject.subject_id
        assert first.subject.xid is None

    def test_department_without_templates_creates_no_messages(self, registrar, session):
        survey = SurveyFactory()
        department = DepartmentFactory(default_message_ids="")
        session.commit()

        result = registrar.register(
            RegistrationRequest(
                survey_id=survey.id,
                department_id=department.id,
                first_name="A",
                last_name="B",
                phone="555-123-4567",
            )
        )

        assert result.status is SubjectStatus.NEW
        assert MessageRepository(session=session).list_for_subject(result.subject.subject_id) == []

    def test_missing_template_is_skipped(self, registrar, refs, session, caplog):
        department = DepartmentFactory(default_message_ids=f"{refs['template_ids'][0]},999999")
        session.commit()

        with caplog.at_level(logging.WARNING, logger="surveyadmin.services.registration"):
            result = registrar.register(self._request(refs, department_id=department.id))

        assert result.status is SubjectStatus.NEW
        messages = MessageRepository(session=session).list_for_subject(result.subject.subject_id)
        assert len(messages) == 1
        assert any("999999" in r.getMessage() for r in caplog.records)

    # -------------------------- Resolution -------------------------------- #

    def test_existing_xid_returns_existing_subject(self, registrar, refs, session):
        """
        GIVEN a subject already registered with xid X100 in the department
        WHEN the same xid is registered again (with padding)
        THEN the existing subject and token are returned and nothing is inserted.
        """
        existing = SubjectFactory(
            xid="X100",
            department=refs["department"],
            respondent__survey=refs["survey"],
        )
        session.commit()
        existing_id, existing_token = existing.id, existing.token
        before = _count(session, Respondent)

        result = registrar.register(self._request(refs, xid="  X100 "))

        assert result.status is SubjectStatus.EXISTING
        assert result.subject.subject_id == existing_id
        assert result.subject.token == existing_token
        assert _count(session, Respondent) == before

    def test_excluded_xid_is_acknowledged_without_persisting(self, registrar, refs, session):
        ExcludedXidFactory(xid="TEST-0000", department_id=refs["department_id"])
        session.commit()
        before = _count(session, Subject)

        result = registrar.register(self._request(refs, xid="TEST-0000"))

        assert result.ok
        assert result.status is SubjectStatus.EXCLUDED
        assert result.subject.subject_id is None
        assert result.subject.token is None
        assert _count(session, Subject) == before

    def test_exclusion_is_scoped_to_department(self, registrar, refs, session):
        ExcludedXidFactory(xid="X100")
        session.commit()

        result = registrar.register(self._request(refs))

        assert result.status is SubjectStatus.NEW

    # -------------------------- Validation -------------------------------- #

    def test_validation_failure_never_opens_a_unit_of_work(self, refs):
        calls = []

        def spy_factory():
            calls.append(1)
            raise AssertionError("unit of work must not be created")

        registrar = SubjectRegistrar(uow_factory=spy_factory)
        result = registrar.register(
            self._request(refs, first_name=" ", email=None, phone="5551234567")
        )

        assert not result.ok
        assert result.error_kind is ErrorKind.VALIDATION
        assert result.error == "First name is required, Phone must match ###-###-####"
        assert calls == []

    def test_missing_contact_is_rejected(self, registrar, refs):
        result = registrar.register(self._request(refs, email="", phone=None))

        assert result.error_kind is ErrorKind.VALIDATION
        assert result.error == "Must have a valid email, phone or both"

    def test_future_date_of_birth_is_rejected(self, registrar, refs, freeze_time):
        with freeze_time("2024-06-01"):
            today = registrar.register(self._request(refs, dob=date(2024, 6, 1)))
            past = registrar.register(self._request(refs, dob=date(2024, 5, 31), xid="X101"))

        assert today.error == "Date of birth must be in the past"
        assert past.status is SubjectStatus.NEW

    # -------------------------- Reference errors -------------------------- #

    def test_unknown_survey_is_a_reference_error(self, registrar, refs):
        result = registrar.register(self._request(refs, survey_id=999999))

        assert result.error_kind is ErrorKind.REFERENCE
        assert result.error == "Survey not found: 999999"

    def test_unknown_department_is_a_reference_error(self, registrar, refs):
        result = registrar.register(self._request(refs, department_id=999999))

        assert result.error_kind is ErrorKind.REFERENCE
        assert result.error == "Department not found: 999999"

    def test_invalid_template_id_rolls_back_everything(self, registrar, refs, session):
        """
        GIVEN a department whose default message ids contain garbage
        WHEN a subject is registered
        THEN the call fails as a reference error and no respondent survives.
        """
        department = DepartmentFactory(default_message_ids="abc")
        session.commit()
        respondents_before = _count(session, Respondent)
        subjects_before = _count(session, Subject)

        result = registrar.register(self._request(refs, department_id=department.id))

        assert result.error_kind is ErrorKind.REFERENCE
        assert result.error == "Invalid message template ID: abc"
        assert _count(session, Respondent) == respondents_before
        assert _count(session, Subject) == subjects_before

    # -------------------------- Token conflicts --------------------------- #

    def test_token_race_on_insert_is_retried(self, refs, session, monkeypatch, caplog):
        """
        GIVEN the pre-check misses a token another respondent already holds
        WHEN the insert hits the unique constraint
        THEN only the savepoint is rolled back and a fresh token is issued.
        """
        RespondentFactory(token="RACETOKEN", survey=refs["survey"])
        session.commit()
        monkeypatch.setattr(RespondentRepository, "token_exists", lambda self, s, t: False)
        registrar = SubjectRegistrar(generator=ScriptedGenerator("RACETOKEN", "FRESHTOKN"))

        with caplog.at_level(logging.INFO, logger="surveyadmin.services.registration"):
            result = registrar.register(self._request(refs))

        assert result.status is SubjectStatus.NEW
        assert result.subject.token == "FRESHTOKN"
        assert any("Token conflict on insert" in r.getMessage() for r in caplog.records)

    def test_exhausted_token_space_is_a_token_generation_error(self, refs, session):
        RespondentFactory(token="ONLYTOKEN", survey=refs["survey"])
        session.commit()
        registrar = SubjectRegistrar(generator=ScriptedGenerator("ONLYTOKEN"))

        result = registrar.register(self._request(refs))

        assert result.error_kind is ErrorKind.TOKEN_GENERATION
        assert result.error == "Unable to generate a unique token"

    def test_xid_race_on_insert_is_a_conflict(self, registrar, refs, session, monkeypatch):
        SubjectFactory(
            xid="X100",
            department=refs["department"],
            respondent__survey=refs["survey"],
        )
        session.commit()
        monkeypatch.setattr(
            SubjectRepository, "get_by_xid_and_department", lambda self, xid, dep: None
        )

        result = registrar.register(self._request(refs))

        assert result.error_kind is ErrorKind.CONFLICT
        assert "X100" in result.error

    # -------------------------- Batches ----------------------------------- #

    def test_register_many_reports_labels_in_order(self, registrar, refs, session):
        ExcludedXidFactory(xid="EX-1", department_id=refs["department_id"])
        session.commit()

        batch = registrar.register_many(
            [
                self._request(refs, xid="B1"),
                self._request(refs, xid="B1"),
                self._request(refs, xid="EX-1"),
                self._request(refs, xid="B2", last_name=""),
                self._request(refs, xid="B3"),
            ]
        )

        assert batch.statuses == [
            "New Subject: B1",
            "Existing Subject: B1",
            "Excluded Subject: EX-1",
            "New Subject: B3",
        ]
        assert batch.errors == ["Error processing B2: Last name is required"]
        assert len(batch.results) == 5
        assert _count(session, Message) >= 4
