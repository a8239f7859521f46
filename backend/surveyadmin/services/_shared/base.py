from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from surveyadmin.core import errors as api_errors
from surveyadmin.repositories.base import Pagination
from surveyadmin.services._shared.errors import (
    ConflictError,
    InvalidImportError,
    NotFoundError,
    ServiceError,
    TokenGenerationError,
)
from surveyadmin.uow.base import UnitOfWork
from surveyadmin.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

UowFactory = Callable[[], UnitOfWork]


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param actor: Identity (JWT subject) performing the call.
    :param request_id: Correlation id for logging.
    """

    actor: str | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide read-only and read-write units of work.
    * Centralize error translation.
    * Offer shared pagination helpers.

    Notes
    -----
    - Services never touch the global session; always use a Unit of Work.
    - ``uow_factory`` replaces the read-write UoW, mainly for tests.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(
        self,
        *,
        ctx: ServiceContext | None = None,
        uow_factory: UowFactory | None = None,
    ) -> None:
        self.ctx = ctx or ServiceContext()
        self._uow_factory = uow_factory

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> UnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Injected UoW when a factory was given, else :class:`SQLAlchemyUnitOfWork`.
        """
        if self._uow_factory is not None:
            return self._uow_factory()
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(
        self, *, page: int, limit: int, sort: Iterable[str] | None = None
    ) -> Pagination:
        """Build a :class:`Pagination` value object with basic clamping."""
        page = max(1, int(page))
        limit = max(1, int(limit))
        return Pagination(page=page, limit=limit, sort=list(sort or []))

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :returns: Translated exception ready to be re-raised.
        """
        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        if isinstance(exc, TokenGenerationError):
            return api_errors.TokenGenerationFailed(str(exc))

        if isinstance(exc, InvalidImportError):
            return api_errors.APIError(
                message=str(exc), status_code=400, code="invalid_import"
            )

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=str(exc), status_code=400, code="bad_request")

        return exc
