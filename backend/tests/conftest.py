"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside an outer transaction against an in-memory SQLite
database. The application session joins it through a SAVEPOINT, so unit of
work commits and rollbacks behave normally while nothing leaks between cases.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from flask import Flask
from flask_jwt_extended import create_access_token
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from surveyadmin.core.config import TestingConfig
from surveyadmin.core.extensions import db as _db  # Flask-SQLAlchemy instance
from surveyadmin.factory import create_app  # application factory under test


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - In-memory SQLite, no Redis (the in-memory idempotency store is used).
    - A fixed JWT secret so tests can mint bearer tokens.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    LOG_LEVEL = "WARNING"
    DEFAULT_SURVEY_ID = 1


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing."""
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    pysqlite's implicit transaction handling is switched off so that
    ``BEGIN``/``SAVEPOINT`` are emitted exactly when SQLAlchemy asks.
    """
    with app.app_context():
        engine = _db.engine

        @event.listens_for(engine, "connect")
        def _disable_pysqlite_transactions(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")

        # Drop any connection opened before the listeners existed.
        engine.dispose()
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(app, db, connection):
    """Provide a scoped session joined to a per-test outer transaction.

    ``join_transaction_mode="create_savepoint"`` makes session-level
    ``commit()``/``rollback()`` act on a SAVEPOINT; the outer transaction is
    rolled back after the test. A fresh app context is pushed per test so
    ``flask.g`` does not leak between cases.
    """
    app_ctx = app.app_context()
    app_ctx.push()
    outer = connection.begin()
    factory = sessionmaker(
        bind=connection,
        join_transaction_mode="create_savepoint",
        autoflush=False,
    )
    scoped = scoped_session(factory)

    original_session = db.session
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        outer.rollback()
        app_ctx.pop()


@pytest.fixture()
def client(app, session):
    """Flask test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def token_for(app: Flask) -> Callable[..., str]:
    """Return a factory minting access tokens carrying ``roles``."""

    def _mint(*roles: str, identity: str = "tester") -> str:
        with app.app_context():
            return create_access_token(identity=identity, additional_claims={"roles": list(roles)})

    return _mint


@pytest.fixture()
def auth_header(token_for) -> Callable[..., dict[str, str]]:
    """Return a factory building ``Authorization`` headers for ``roles``."""

    def _header(*roles: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_for(*roles)}"}

    return _header


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`."""

    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2024-01-01")

    return _factory


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
