"""
SubjectQueryService
===================

Read side for registered subjects. All operations run in a read-only unit
of work; registration lives in :mod:`surveyadmin.services.registration`.
"""

from __future__ import annotations

from surveyadmin.models.subject import Subject
from surveyadmin.repositories.subject import SubjectRepository
from surveyadmin.services._shared.base import BaseService
from surveyadmin.services._shared.dto import PageMeta
from surveyadmin.services._shared.errors import NotFoundError
from surveyadmin.services.subjects.dto import SubjectListIn, SubjectListOut, SubjectOut


class SubjectQueryService(BaseService):
    """Lookups and paginated listings of subjects."""

    def get_subject(self, subject_id: int) -> SubjectOut:
        """
        Retrieve a subject by identifier.

        :raises NotFoundError: If the subject does not exist.
        """
        with self.ro_uow() as uow:
            repo: SubjectRepository = uow.subjects
            subject = repo.get(subject_id)
            if subject is None:
                raise NotFoundError("Subject", subject_id)
            return self._to_out(subject)

    def list_subjects(self, dto: SubjectListIn) -> SubjectListOut:
        """
        List subjects with pagination, whitelisted filters and safe sorting.

        :param dto: Listing input with pagination and filters.
        :type dto: :class:`SubjectListIn`
        """
        with self.ro_uow() as uow:
            repo: SubjectRepository = uow.subjects
            pagination = self.ensure_pagination(
                page=dto.pagination.page,
                limit=dto.pagination.limit,
                sort=dto.pagination.sort,
            )
            page = repo.paginate(pagination, filters=dto.filters or None, with_total=dto.with_total)
            items = [self._to_out(s) for s in page.items]
            meta = PageMeta(
                page=page.page,
                limit=page.limit,
                total=page.total,
                has_prev=page.page > 1,
                has_next=(page.page * page.limit) < page.total,
            )
            return SubjectListOut(items=items, meta=meta)

    @staticmethod
    def _to_out(subject: Subject) -> SubjectOut:
        return SubjectOut(
            id=subject.id,
            xid=subject.xid,
            survey_id=subject.survey_id,
            department_id=subject.department_id,
            respondent_id=subject.respondent_id,
            token=subject.token,
            first_name=subject.first_name,
            last_name=subject.last_name,
            middle_name=subject.middle_name,
            dob=subject.dob,
            email=subject.email,
            phone=subject.phone,
            created_at=subject.created_at,
        )
