from surveyadmin.services._shared.ports.idempotency_store import (
    IdempotencyStore,
    InMemoryIdempotencyStore,
)

__all__ = ["IdempotencyStore", "InMemoryIdempotencyStore"]
