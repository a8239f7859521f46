"""
Abstract Unit of Work contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class UnitOfWork(ABC):
    """
    Transactional boundary for one registration or query use-case.

    Responsibilities:
    - Provide repositories bound to the same session/transaction.
    - Commit on success, rollback on error.
    """

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...

    def savepoint(self) -> Any:
        """Return a context manager scoping a nested transaction (SAVEPOINT)."""
        raise NotImplementedError

    # Concrete implementations expose repositories such as respondents and subjects.
