from __future__ import annotations

import time
from typing import Any, Protocol


class IdempotencyStore(Protocol):
    """
    Storage for replayable responses keyed by ``Idempotency-Key``.

    ``save`` overwrites silently; callers only save after a successful write.
    """

    def get(self, key: str) -> dict[str, Any] | None: ...
    def save(self, key: str, payload: dict[str, Any], *, ttl_seconds: int) -> None: ...


class InMemoryIdempotencyStore(IdempotencyStore):
    """Process-local store; entries expire lazily on read."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[float, dict[str, Any]]] = {}

    def get(self, key: str) -> dict[str, Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if expires_at <= time.monotonic():
            self._entries.pop(key, None)
            return None
        return payload

    def save(self, key: str, payload: dict[str, Any], *, ttl_seconds: int) -> None:
        self._entries[key] = (time.monotonic() + max(1, int(ttl_seconds)), payload)
