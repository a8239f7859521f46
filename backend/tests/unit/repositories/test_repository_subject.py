"""Unit tests for subject and exclusion repositories."""

from __future__ import annotations

import pytest
from surveyadmin.models import Subject
from surveyadmin.repositories import ExcludedXidRepository, SubjectRepository
from surveyadmin.repositories.base import Pagination, parse_sort_tokens
from tests.factories.subject import ExcludedXidFactory, SubjectFactory
from tests.factories.survey import DepartmentFactory


class TestSubjectRepository:
    @pytest.fixture()
    def repo(self, session) -> SubjectRepository:
        return SubjectRepository(session=session)

    def test_get_by_xid_and_department(self, repo):
        subject = SubjectFactory(xid="AB-1")
        SubjectFactory(xid="AB-1")  # same xid, other department

        assert repo.get_by_xid_and_department("AB-1", subject.department_id) is subject
        assert repo.get_by_xid_and_department("AB-2", subject.department_id) is None

    def test_optional_text_is_stored_as_null(self, repo, session):
        subject = SubjectFactory(xid="  ", middle_name="", phone=" ", first_name=" Ann ")
        session.flush()

        assert subject.xid is None
        assert subject.middle_name is None
        assert subject.phone is None
        assert subject.first_name == "Ann"

    def test_paginate_ignores_unknown_sort_and_filter_keys(self, repo):
        dep = DepartmentFactory()
        created = [SubjectFactory(department=dep) for _ in range(3)]

        page = repo.paginate(
            Pagination(page=1, limit=10, sort=["-nope"]),
            filters={"department_id": dep.id, "email": "ignored@example.com"},
        )

        assert page.total == 3
        assert [s.id for s in page.items] == [s.id for s in created]

    def test_token_property_reads_respondent(self):
        subject = Subject(first_name="A", last_name="B")
        assert subject.token is None


class TestExcludedXidRepository:
    def test_is_excluded(self, session):
        excluded = ExcludedXidFactory(xid="NOPE")
        repo = ExcludedXidRepository(session=session)

        assert repo.is_excluded("NOPE", excluded.department_id) is True
        assert repo.is_excluded("NOPE", excluded.department_id + 1000) is False


class TestSortTokens:
    def test_parse(self):
        assert parse_sort_tokens(["-created_at", "last_name", "-", " "]) == [
            ("created_at", True),
            ("last_name", False),
        ]
