"""Unit tests for request validation and message template parsing."""

from __future__ import annotations

from datetime import date

import pytest
from surveyadmin.services._shared.errors import NotFoundError
from surveyadmin.services.registration.dto import RegistrationRequest, SubjectStatus
from surveyadmin.services.registration.messages import parse_template_ids
from surveyadmin.services.registration.validation import validate_request

TODAY = date(2024, 1, 1)


def _req(**overrides) -> RegistrationRequest:
    data = {
        "survey_id": 1,
        "department_id": 1,
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
    }
    data.update(overrides)
    return RegistrationRequest(**data)


class TestValidateRequest:
    def test_valid_request_has_no_errors(self):
        assert validate_request(_req(dob=date(1990, 1, 1)), today=TODAY) == []

    def test_phone_alone_is_enough_contact(self):
        assert validate_request(_req(email=None, phone="555-123-4567"), today=TODAY) == []

    def test_all_problems_are_reported_in_order(self):
        errors = validate_request(
            _req(first_name="", last_name="x" * 51, email="nope", phone="555", dob=TODAY),
            today=TODAY,
        )

        assert errors == [
            "First name is required",
            "Last name must be at most 50 characters",
            "Invalid email address",
            "Phone must match ###-###-####",
            "Date of birth must be in the past",
        ]

    def test_missing_contact(self):
        assert validate_request(_req(email="  ", phone=""), today=TODAY) == [
            "Must have a valid email, phone or both"
        ]

    def test_long_middle_name(self):
        assert validate_request(_req(middle_name="m" * 51), today=TODAY) == [
            "Middle name must be at most 50 characters"
        ]

    def test_email_and_xid_fit_their_columns(self):
        errors = validate_request(
            _req(email="a" * 300 + "@example.com", xid="X" * 256), today=TODAY
        )

        assert errors == [
            "Email must be at most 255 characters",
            "XID must be at most 255 characters",
        ]

    def test_xid_at_column_width_is_accepted(self):
        assert validate_request(_req(xid=" " + "X" * 255 + " "), today=TODAY) == []


class TestRequestHelpers:
    @pytest.mark.parametrize("raw, expected", [(" X1 ", "X1"), ("   ", None), (None, None)])
    def test_normalized_xid(self, raw, expected):
        assert _req(xid=raw).normalized_xid == expected

    def test_status_labels(self):
        assert [s.label for s in SubjectStatus] == [
            "New Subject",
            "Existing Subject",
            "Excluded Subject",
        ]


class TestParseTemplateIds:
    @pytest.mark.parametrize(
        "raw, expected",
        [(None, []), ("", []), ("   ", []), ("3", [3]), ("3, 5", [3, 5]), ("3,,5,", [3, 5])],
    )
    def test_parsing(self, raw, expected):
        assert parse_template_ids(raw) == expected

    def test_non_integer_segment(self):
        with pytest.raises(NotFoundError) as exc_info:
            parse_template_ids("3,x7")
        assert str(exc_info.value) == "Invalid message template ID: x7"
