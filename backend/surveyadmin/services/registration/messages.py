"""Render a department's default message templates for a new subject."""

from __future__ import annotations

import logging

from surveyadmin.models.message import Message
from surveyadmin.models.subject import Subject
from surveyadmin.models.survey import Department
from surveyadmin.repositories.message import MessageTemplateRepository
from surveyadmin.services._shared.errors import NotFoundError

log = logging.getLogger(__name__)


def parse_template_ids(raw: str | None) -> list[int]:
    """
    Split a ``default_message_ids`` value such as ``"3, 5"`` into ids.

    Blank input (and empty segments) yield nothing.

    :raises NotFoundError: When a segment is not an integer.
    """
    ids: list[int] = []
    for segment in (raw or "").split(","):
        piece = segment.strip()
        if not piece:
            continue
        try:
            ids.append(int(piece))
        except ValueError:
            raise NotFoundError(
                "MessageTemplate", piece, message=f"Invalid message template ID: {piece}"
            ) from None
    return ids


def build_messages(
    subject: Subject,
    department: Department,
    templates: MessageTemplateRepository,
) -> list[Message]:
    """
    Build (unsaved) messages for ``subject`` from ``department`` templates.

    Missing templates are skipped with a warning; the body gets the
    respondent token substituted for ``<TOKEN>``.
    """
    ids = parse_template_ids(department.default_message_ids)
    if not ids:
        return []

    found = templates.get_many(ids)
    token = subject.respondent.token if subject.respondent is not None else ""
    messages: list[Message] = []
    for template_id in ids:
        template = found.get(template_id)
        if template is None:
            log.warning(
                "Message template %s not found; skipping",
                template_id,
                extra={"department_id": department.id},
            )
            continue
        messages.append(
            Message(
                subject=subject,
                subject_id=subject.id,
                message_type_id=template.message_type_id,
                mime_type=template.mime_type,
                subject_line=template.subject,
                body=template.render(token),
            )
        )
    return messages
