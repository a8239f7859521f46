"""Subject registration and lookup schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load

from surveyadmin.services.registration.dto import RegistrationRequest


class RegistrationRequestSchema(Schema):
    """Payload registering one participant.

    Presence and types are checked here; business rules (contact method,
    phone format, names) are enforced by the registrar.
    """

    survey_id = fields.Integer(required=True)
    department_id = fields.Integer(required=True)
    first_name = fields.String(required=True)
    last_name = fields.String(required=True)
    middle_name = fields.String(load_default=None, allow_none=True)
    dob = fields.Date(load_default=None, allow_none=True)
    email = fields.String(load_default=None, allow_none=True)
    phone = fields.String(load_default=None, allow_none=True)
    xid = fields.String(load_default=None, allow_none=True)

    @post_load
    def make_request(self, data: dict[str, Any], **_: Any) -> RegistrationRequest:
        return RegistrationRequest(**data)


class RegisteredSubjectSchema(Schema):
    """Outcome of one successful registration (new, existing or excluded)."""

    status = fields.Function(lambda obj: obj.status.value)
    label = fields.Function(lambda obj: obj.status.label)
    subject_id = fields.Integer(allow_none=True)
    respondent_id = fields.Integer(allow_none=True)
    token = fields.String(allow_none=True)
    xid = fields.String(allow_none=True)
    survey_id = fields.Integer()
    department_id = fields.Integer()


class SubjectFilterSchema(Schema):
    """Query parameters accepted by the subjects list endpoint."""

    class Meta:
        unknown = EXCLUDE

    department_id = fields.Integer(load_default=None)
    survey_id = fields.Integer(load_default=None)
    xid = fields.String(load_default=None)


class SubjectSchema(Schema):
    """Registered subject with its respondent token."""

    id = fields.Integer(required=True)
    xid = fields.String(allow_none=True)
    survey_id = fields.Integer()
    department_id = fields.Integer()
    respondent_id = fields.Integer()
    token = fields.String(allow_none=True)
    first_name = fields.String()
    last_name = fields.String()
    middle_name = fields.String(allow_none=True)
    dob = fields.Date(allow_none=True)
    email = fields.String(allow_none=True)
    phone = fields.String(allow_none=True)
    created_at = fields.DateTime(allow_none=True)


class ImportQuerySchema(Schema):
    """Form/query values accepted next to a CSV upload."""

    class Meta:
        unknown = EXCLUDE

    survey_id = fields.Integer(load_default=None)
