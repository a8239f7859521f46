"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from surveyadmin.core.errors import Forbidden
from surveyadmin.core.logger import ensure_request_id
from surveyadmin.infra.redis.redis_idempotency_store import RedisIdempotencyStore
from surveyadmin.schemas.common import PaginationQuerySchema
from surveyadmin.services._shared.base import ServiceContext
from surveyadmin.services._shared.dto import PaginationIn
from surveyadmin.services._shared.ports import IdempotencyStore, InMemoryIdempotencyStore

F = TypeVar("F", bound=Callable[..., Any])

IMPORTER_ROLE = "elicit_importer"
SUBJECT_ROLES = (IMPORTER_ROLE, "elicit_admin", "elicit_user")


def parse_pagination(default_limit: int = 20, max_limit: int = 200) -> PaginationIn:
    """Parse pagination parameters from ``request.args`` using Marshmallow."""

    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load(request.args)
    return PaginationIn(page=data["page"], limit=data["limit"], sort=data["sort"])


def service_context() -> ServiceContext:
    """Build the request-scoped service context (call after JWT verification)."""

    identity = get_jwt_identity()
    return ServiceContext(
        actor=str(identity) if identity is not None else None,
        request_id=ensure_request_id(),
    )


def require_roles(*roles: str) -> Callable[[F], F]:
    """Ensure the verified JWT carries at least one of ``roles``.

    Roles are read from the claim named by ``JWT_ROLES_CLAIM`` (``roles``).
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            verify_jwt_in_request(optional=False)
            claims = get_jwt() or {}
            claim = current_app.config.get("JWT_ROLES_CLAIM", "roles")
            granted = claims.get(claim) or []
            if isinstance(granted, str):
                granted = [granted]
            if not set(roles) & set(granted):
                raise Forbidden("Insufficient role")
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def idempotency_store() -> IdempotencyStore:
    """Return the app-wide idempotency store (Redis when configured)."""

    store = current_app.extensions.get("idempotency_store")
    if store is None:
        redis_conn = current_app.extensions.get("redis_client")
        if redis_conn is not None:
            store = RedisIdempotencyStore(redis_conn)
        else:
            store = InMemoryIdempotencyStore()
        current_app.extensions["idempotency_store"] = store
    return cast(IdempotencyStore, store)


def enforce_idempotency(key: str | None) -> tuple[bool, dict[str, Any] | None]:
    """Check whether the provided ``Idempotency-Key`` was already used."""

    if not key:
        return False, None
    cached = idempotency_store().get(key)
    if cached is None:
        return False, None
    return True, cached


def store_idempotent_response(key: str | None, payload: dict[str, Any]) -> None:
    """Persist the response blueprint for subsequent replays."""

    if not key:
        return
    ttl = int(current_app.config.get("IDEMPOTENCY_TTL_SECONDS", 24 * 3600))
    idempotency_store().save(key, payload, ttl_seconds=ttl)


def build_cached_response(payload: dict[str, Any]) -> Response:
    """Rehydrate a Flask response object from cached payload metadata."""

    response = json_response(payload.get("body", {}), status=payload.get("status", 200))
    response.headers["Idempotent-Replay"] = "true"
    return response


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
