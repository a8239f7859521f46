import json
from typing import Any, cast

import redis  # type: ignore[import-untyped]


class RedisIdempotencyStore:
    """
    Replayable registration responses stored as JSON with a TTL.
    """

    def __init__(self, r: redis.Redis, *, namespace: str = "idem:subjects"):
        self.r = r
        self.namespace = namespace

    def _k(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> dict[str, Any] | None:
        raw = self.r.get(self._k(key))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return cast(dict[str, Any], json.loads(raw))

    def save(self, key: str, payload: dict[str, Any], *, ttl_seconds: int) -> None:
        self.r.set(self._k(key), json.dumps(payload, default=str), ex=max(1, int(ttl_seconds)))
