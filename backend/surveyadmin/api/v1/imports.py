"""CSV import endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from surveyadmin.api.deps import IMPORTER_ROLE, json_response, require_roles, service_context, timing
from surveyadmin.core.errors import APIError
from surveyadmin.schemas import ImportQuerySchema, RegisteredSubjectSchema
from surveyadmin.services._shared.errors import ServiceError
from surveyadmin.services.imports.service import CsvBatchImporter
from surveyadmin.services.registration.service import SubjectRegistrar

bp = Blueprint("imports", __name__, url_prefix="/imports")

import_query_schema = ImportQuerySchema()
registered_list_schema = RegisteredSubjectSchema(many=True)

_RAW_CSV_TYPES = ("text/csv", "text/plain", "application/csv")


@bp.post("/subjects")
@require_roles(IMPORTER_ROLE)
@timing
def import_subjects():
    """Register every row of an uploaded CSV.

    Accepts multipart ``file`` or a raw ``text/csv`` body; ``survey_id`` comes
    from the form or query string, defaulting to ``DEFAULT_SURVEY_ID``.
    """

    upload = request.files.get("file")
    if upload is not None:
        source = upload.stream
    elif request.mimetype in _RAW_CSV_TYPES and request.content_length:
        source = request.get_data()
    else:
        raise APIError("No CSV file provided in the 'file' field", status_code=400)

    params = import_query_schema.load({**request.args.to_dict(), **request.form.to_dict()})
    survey_id = params["survey_id"] or int(current_app.config.get("DEFAULT_SURVEY_ID", 1))

    registrar = SubjectRegistrar(ctx=service_context())
    try:
        result = CsvBatchImporter(registrar).import_batch(source, survey_id=survey_id)
    except ServiceError as exc:
        raise registrar.translate_exceptions(exc) from exc

    return json_response(
        {
            "imported": result.imported,
            "processed": result.processed,
            "statuses": registered_list_schema.dump(result.statuses),
            "errors": result.errors,
            "message": result.message,
        }
    )
