"""Idempotent reference-data seeds for local development environments."""

from __future__ import annotations

import logging
from typing import Any, TypeVar, cast

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import select
from sqlalchemy.orm import Session

from surveyadmin.models.message import MessageTemplate, MessageType
from surveyadmin.models.subject import ExcludedXid
from surveyadmin.models.survey import Department, Survey

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

SURVEY_FIXTURES: list[dict[str, Any]] = [
    {
        "name": "baseline",
        "title": "Baseline Family History Survey",
        "description": "Default survey CSV uploads register into.",
        "display_order": 1,
    },
]

MESSAGE_TYPE_FIXTURES: list[str] = ["EMAIL", "SMS"]

DEPARTMENT_FIXTURES: list[dict[str, Any]] = [
    {"name": "Cancer Genetics", "code": "CG"},
    {"name": "Cardiology", "code": "CARD"},
]

# Keyed by department name; rendered into messages for every new subject.
TEMPLATE_FIXTURES: list[dict[str, Any]] = [
    {
        "department": "Cancer Genetics",
        "type": "EMAIL",
        "subject": "Your family history survey",
        "message": "<p>Please complete your survey using access code <b><TOKEN></b>.</p>",
        "mime_type": "text/html",
    },
    {
        "department": "Cancer Genetics",
        "type": "SMS",
        "subject": "Survey reminder",
        "message": "Your survey access code is <TOKEN>",
        "mime_type": "text/plain",
    },
    {
        "department": "Cardiology",
        "type": "EMAIL",
        "subject": "Cardiology intake survey",
        "message": "<p>Use code <TOKEN> to start your intake survey.</p>",
        "mime_type": "text/html",
    },
]

EXCLUDED_XID_FIXTURES: list[dict[str, Any]] = [
    {"department": "Cardiology", "xid": "TEST-0000", "reason": "QA record"},
]


def _session(database: SQLAlchemy) -> Session:
    return cast(Session, database.session)


def _touch(summary: dict[str, dict[str, int]], table: str, created: bool) -> None:
    """Update summary counters for the given table."""
    entry = summary.setdefault(table, {"created": 0, "existing": 0})
    if created:
        entry["created"] += 1
    else:
        entry["existing"] += 1


def _get_or_create(
    session: Session,
    model: type[T],
    *,
    defaults: dict[str, Any] | None = None,
    **filters: Any,
) -> tuple[T, bool]:
    """Fetch ``model`` by ``filters`` or create it using ``defaults``."""
    instance = session.execute(select(model).filter_by(**filters)).scalar_one_or_none()
    if instance is not None:
        return instance, False
    params = dict(defaults or {})
    params.update(filters)
    instance = cast(T, model(**params))
    session.add(instance)
    session.flush()
    return instance, True


def seed_surveys(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Create surveys and message types."""
    if verbose:
        LOGGER.info("Seeding surveys and message types...")
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}

    for fixture in SURVEY_FIXTURES:
        defaults = {k: v for k, v in fixture.items() if k != "name"}
        _, created = _get_or_create(session, Survey, name=fixture["name"], defaults=defaults)
        _touch(summary, "surveys", created)

    for name in MESSAGE_TYPE_FIXTURES:
        _, created = _get_or_create(session, MessageType, name=name)
        _touch(summary, "message_types", created)

    session.commit()
    return summary


def seed_departments(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Create departments, their templates and the exclusion list.

    ``default_message_ids`` is rewritten from the department's templates.
    """
    if verbose:
        LOGGER.info("Seeding departments and message templates...")
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}
    departments: dict[str, Department] = {}

    for fixture in DEPARTMENT_FIXTURES:
        department, created = _get_or_create(
            session, Department, name=fixture["name"], defaults={"code": fixture["code"]}
        )
        departments[department.name] = department
        _touch(summary, "departments", created)

    template_ids: dict[str, list[int]] = {}
    for fixture in TEMPLATE_FIXTURES:
        department = departments[fixture["department"]]
        message_type = session.execute(
            select(MessageType).filter_by(name=fixture["type"])
        ).scalar_one()
        template, created = _get_or_create(
            session,
            MessageTemplate,
            department_id=department.id,
            message_type_id=message_type.id,
            subject=fixture["subject"],
            defaults={"message": fixture["message"], "mime_type": fixture["mime_type"]},
        )
        template_ids.setdefault(department.name, []).append(template.id)
        _touch(summary, "message_templates", created)

    for name, ids in template_ids.items():
        departments[name].default_message_ids = ",".join(str(i) for i in ids)

    for fixture in EXCLUDED_XID_FIXTURES:
        department = departments[fixture["department"]]
        _, created = _get_or_create(
            session,
            ExcludedXid,
            xid=fixture["xid"],
            department_id=department.id,
            defaults={"reason": fixture["reason"], "created_by": "seed"},
        )
        _touch(summary, "excluded_xids", created)

    session.commit()
    return summary


def run_all(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Run all seeders in foreign-key order."""
    if verbose:
        LOGGER.info("Running full seed pipeline...")
    combined: dict[str, dict[str, int]] = {}
    for func in (seed_surveys, seed_departments):
        result = func(database, verbose=verbose)
        for table, counters in result.items():
            entry = combined.setdefault(table, {"created": 0, "existing": 0})
            entry["created"] += counters.get("created", 0)
            entry["existing"] += counters.get("existing", 0)
    return combined


__all__ = ["seed_surveys", "seed_departments", "run_all"]
