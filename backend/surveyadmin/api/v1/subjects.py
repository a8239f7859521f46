"""Subject registration and lookup endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from surveyadmin.api.deps import (
    SUBJECT_ROLES,
    build_cached_response,
    enforce_idempotency,
    json_response,
    parse_pagination,
    require_roles,
    service_context,
    store_idempotent_response,
    timing,
)
from surveyadmin.core.errors import (
    APIError,
    Conflict,
    NotFound,
    TokenGenerationFailed,
    Unprocessable,
)
from surveyadmin.schemas import (
    RegisteredSubjectSchema,
    RegistrationRequestSchema,
    SubjectFilterSchema,
    SubjectSchema,
    build_meta,
)
from surveyadmin.services._shared.errors import ServiceError
from surveyadmin.services.registration.dto import ErrorKind, RegistrationResult, SubjectStatus
from surveyadmin.services.registration.service import SubjectRegistrar
from surveyadmin.services.subjects.dto import SubjectListIn
from surveyadmin.services.subjects.service import SubjectQueryService

bp = Blueprint("subjects", __name__, url_prefix="/subjects")

registration_schema = RegistrationRequestSchema()
registered_schema = RegisteredSubjectSchema()
subject_schema = SubjectSchema()
subject_list_schema = SubjectSchema(many=True)
subject_filter_schema = SubjectFilterSchema()

_ERRORS_BY_KIND: dict[ErrorKind, type[APIError]] = {
    ErrorKind.VALIDATION: Unprocessable,
    ErrorKind.REFERENCE: NotFound,
    ErrorKind.CONFLICT: Conflict,
    ErrorKind.TOKEN_GENERATION: TokenGenerationFailed,
}


def _raise_for_result(result: RegistrationResult) -> None:
    if result.ok:
        return
    error_cls = _ERRORS_BY_KIND.get(result.error_kind) if result.error_kind else None
    if error_cls is None:  # pragma: no cover - every kind is mapped
        raise APIError(result.error or "Registration failed")
    raise error_cls(result.error or "Registration failed")


@bp.get("")
@require_roles(*SUBJECT_ROLES)
@timing
def list_subjects():
    """Return paginated subjects (filters: department_id, survey_id, xid)."""

    filters = subject_filter_schema.load(request.args)
    pagination = parse_pagination()
    service = SubjectQueryService(ctx=service_context())
    active = {k: v for k, v in filters.items() if v is not None}
    out = service.list_subjects(SubjectListIn(pagination=pagination, filters=active))
    data = subject_list_schema.dump(out.items)
    meta = build_meta(total=out.meta.total, page=out.meta.page, limit=out.meta.limit)
    return json_response({"data": data, "meta": meta})


@bp.get("/<int:subject_id>")
@require_roles(*SUBJECT_ROLES)
@timing
def get_subject(subject_id: int):
    """Return one subject with its token."""

    service = SubjectQueryService(ctx=service_context())
    try:
        subject = service.get_subject(subject_id)
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc
    return json_response({"data": subject_schema.dump(subject)})


@bp.post("")
@require_roles(*SUBJECT_ROLES)
@timing
def register_subject():
    """Register one subject; ``201`` when created, ``200`` when existing or excluded."""

    idempotency_key = request.headers.get("Idempotency-Key")
    is_replay, cached = enforce_idempotency(idempotency_key)
    if is_replay and cached:
        return build_cached_response(cached)

    payload = registration_schema.load(request.get_json(silent=True) or {})
    result = SubjectRegistrar(ctx=service_context()).register(payload)
    _raise_for_result(result)

    status = 201 if result.status is SubjectStatus.NEW else 200
    body = {"data": registered_schema.dump(result.subject)}
    store_idempotent_response(idempotency_key, {"body": body, "status": status})
    return json_response(body, status=status)


@bp.post("/batch")
@require_roles(*SUBJECT_ROLES)
@timing
def register_subjects():
    """Register a list of subjects; each one commits or fails on its own."""

    payloads = registration_schema.load(request.get_json(silent=True) or [], many=True)
    batch = SubjectRegistrar(ctx=service_context()).register_many(payloads)
    data = [
        registered_schema.dump(r.subject) if r.subject is not None else None
        for r in batch.results
    ]
    return json_response({"data": data, "statuses": batch.statuses, "errors": batch.errors})
