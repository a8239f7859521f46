"""Unit of Work implementations."""

from surveyadmin.uow.base import UnitOfWork
from surveyadmin.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = ["UnitOfWork", "SQLAlchemyUnitOfWork", "SQLAlchemyReadOnlyUnitOfWork"]
