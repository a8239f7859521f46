"""
SubjectRegistrar
================

Registers one participant atomically:

- Validates the request before any persistence.
- Resolves excluded and already-registered ``(xid, department)`` pairs.
- Issues a token, inserts Respondent + Subject and renders the department's
  messages in a single read-write unit of work.
- Retries issuance when the respondent insert loses a token race.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date

from sqlalchemy.exc import IntegrityError

from surveyadmin.models.respondent import TOKEN_UNIQUE_CONSTRAINT, Respondent
from surveyadmin.models.subject import XID_UNIQUE_CONSTRAINT, Subject
from surveyadmin.services._shared.base import BaseService, ServiceContext, UowFactory
from surveyadmin.services._shared.errors import (
    ConflictError,
    NotFoundError,
    TokenGenerationError,
    is_unique_violation,
)
from surveyadmin.services.registration.dto import (
    BatchRegistrationResult,
    ErrorKind,
    RegisteredSubject,
    RegistrationRequest,
    RegistrationResult,
    SubjectStatus,
)
from surveyadmin.services.registration.messages import build_messages
from surveyadmin.services.registration.validation import validate_request
from surveyadmin.services.tokens.generator import RandomStringGenerator
from surveyadmin.services.tokens.service import TokenIssuer
from surveyadmin.uow.base import UnitOfWork

log = logging.getLogger(__name__)

MAX_INSERT_ATTEMPTS = 4

_TOKEN_COLUMNS = ("respondents.survey_id", "respondents.token")
_XID_COLUMNS = ("subjects.xid", "subjects.department_id")


class SubjectRegistrar(BaseService):
    """
    Orchestrates participant registration (Respondent + Subject + Messages).

    :param generator: Token source handed to :class:`TokenIssuer`.
    :param max_insert_attempts: Token reissues allowed after insert conflicts.
    :param today: Clock for the date-of-birth rule; defaults to ``date.today``.
    """

    def __init__(
        self,
        *,
        ctx: ServiceContext | None = None,
        uow_factory: UowFactory | None = None,
        generator: RandomStringGenerator | None = None,
        max_insert_attempts: int = MAX_INSERT_ATTEMPTS,
        today: Callable[[], date] | None = None,
    ) -> None:
        super().__init__(ctx=ctx, uow_factory=uow_factory)
        self.generator = generator or RandomStringGenerator()
        self.max_insert_attempts = max_insert_attempts
        self._today = today

    def register(self, request: RegistrationRequest) -> RegistrationResult:
        """
        Register one participant.

        :param request: Participant data.
        :type request: :class:`RegistrationRequest`
        :returns: Success with a :class:`RegisteredSubject`, or a classified error.
        :rtype: :class:`RegistrationResult`
        :raises sqlalchemy.exc.OperationalError: Connectivity failures propagate.
        """
        problems = validate_request(request, today=self._today() if self._today else None)
        if problems:
            message = ", ".join(problems)
            log.info("Registration rejected: %s", message)
            return RegistrationResult.failure(ErrorKind.VALIDATION, message)

        try:
            with self.rw_uow() as uow:
                registered = self._register(uow, request)
        except NotFoundError as exc:
            return self._failed(ErrorKind.REFERENCE, exc, request)
        except ConflictError as exc:
            return self._failed(ErrorKind.CONFLICT, exc, request)
        except TokenGenerationError as exc:
            log.error("Token generation failed for survey %s: %s", request.survey_id, exc)
            return RegistrationResult.failure(ErrorKind.TOKEN_GENERATION, str(exc))

        log.info(
            "Subject %s (%s)",
            registered.status.value,
            registered.xid,
            extra={
                "survey_id": registered.survey_id,
                "department_id": registered.department_id,
                "subject_id": registered.subject_id,
            },
        )
        return RegistrationResult.success(registered)

    def register_many(self, requests: Iterable[RegistrationRequest]) -> BatchRegistrationResult:
        """
        Register each request in its own transaction.

        A failing request is reported in ``errors`` and never rolls back the others.
        """
        batch = BatchRegistrationResult()
        for request in requests:
            result = self.register(request)
            batch.results.append(result)
            xid = request.normalized_xid or ""
            if result.ok and result.status is not None:
                batch.statuses.append(f"{result.status.label}: {xid}")
            else:
                batch.errors.append(f"Error processing {xid}: {result.error}")
        return batch

    # ------------------------------------------------------------------ #
    # Transactional steps
    # ------------------------------------------------------------------ #

    def _register(self, uow: UnitOfWork, request: RegistrationRequest) -> RegisteredSubject:
        survey = uow.surveys.get(request.survey_id)
        if survey is None:
            raise NotFoundError("Survey", request.survey_id)
        department = uow.departments.get(request.department_id)
        if department is None:
            raise NotFoundError("Department", request.department_id)

        xid = request.normalized_xid
        if xid is not None:
            if uow.excluded_xids.is_excluded(xid, department.id):
                return RegisteredSubject(
                    status=SubjectStatus.EXCLUDED,
                    survey_id=survey.id,
                    department_id=department.id,
                    xid=xid,
                )
            existing = uow.subjects.get_by_xid_and_department(xid, department.id)
            if existing is not None:
                return self._snapshot(existing, SubjectStatus.EXISTING)

        respondent = self._insert_respondent(uow, survey.id)

        subject = Subject(
            xid=xid,
            survey_id=survey.id,
            department_id=department.id,
            respondent=respondent,
            respondent_id=respondent.id,
            first_name=request.first_name,
            last_name=request.last_name,
            middle_name=request.middle_name,
            dob=request.dob,
            email=request.email,
            phone=request.phone,
        )
        try:
            uow.subjects.add(subject)
        except IntegrityError as exc:
            if is_unique_violation(exc, XID_UNIQUE_CONSTRAINT, _XID_COLUMNS):
                raise ConflictError(
                    "Subject", f"xid {xid} already registered in department {department.id}"
                ) from exc
            raise NotFoundError(
                "Subject", xid or "", message="Invalid survey or department reference"
            ) from exc

        messages = build_messages(subject, department, uow.message_templates)
        if messages:
            uow.messages.add_all(messages)

        return self._snapshot(subject, SubjectStatus.NEW)

    def _insert_respondent(self, uow: UnitOfWork, survey_id: int) -> Respondent:
        """
        Issue a token and insert the respondent inside a SAVEPOINT.

        A unique violation on ``(survey_id, token)`` rolls back only the
        savepoint and issuance starts over.
        """
        issuer = TokenIssuer(uow.respondents, self.generator)
        for attempt in range(1, self.max_insert_attempts + 1):
            respondent = issuer.issue(survey_id)
            try:
                with uow.savepoint():
                    uow.respondents.add(respondent)
            except IntegrityError as exc:
                if not is_unique_violation(exc, TOKEN_UNIQUE_CONSTRAINT, _TOKEN_COLUMNS):
                    raise NotFoundError(
                        "Survey", survey_id, message="Invalid survey reference"
                    ) from exc
                log.info(
                    "Token conflict on insert for survey %s (attempt %s/%s)",
                    survey_id,
                    attempt,
                    self.max_insert_attempts,
                    extra={"survey_id": survey_id},
                )
                continue
            return respondent
        raise TokenGenerationError("Unable to generate a unique token")

    # ------------------------------------------------------------------ #
    # Mapping
    # ------------------------------------------------------------------ #

    @staticmethod
    def _snapshot(subject: Subject, status: SubjectStatus) -> RegisteredSubject:
        return RegisteredSubject(
            status=status,
            survey_id=subject.survey_id,
            department_id=subject.department_id,
            xid=subject.xid,
            subject_id=subject.id,
            respondent_id=subject.respondent_id,
            token=subject.token,
        )

    @staticmethod
    def _failed(
        kind: ErrorKind, exc: Exception, request: RegistrationRequest
    ) -> RegistrationResult:
        log.warning(
            "Registration failed (%s): %s",
            kind.value,
            exc,
            extra={"survey_id": request.survey_id, "department_id": request.department_id},
        )
        return RegistrationResult.failure(kind, str(exc))
