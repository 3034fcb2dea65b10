"""
tests/conftest.py -- Shared test fixtures for JobHunter.

This module provides:
  - memory_db_url(): a fresh named shared-memory SQLite URL
  - user_store / codec / session_manager: unit-level fixtures, one DB per test
  - api_client: TestClient wired to isolated in-memory stores, plus an access
    token for a registered user

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

Settings are read at api.main import time, so the required environment
variables are set here before any app import.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

TEST_SECRET = "test-secret-key-0123456789abcdef0123456789abcdef"

# CRITICAL: Set before any api/ or core/ import so get_settings() validates.
os.environ.setdefault("SECRET_KEY", TEST_SECRET)
os.environ.setdefault("ACCESS_TOKEN_TTL_SECONDS", "300")
os.environ.setdefault("REFRESH_TOKEN_TTL_SECONDS", "86400")
os.environ.setdefault("DATABASE_URL", "sqlite:///file:test_default?mode=memory&cache=shared&uri=true")
# High enough that no test module trips the per-IP login limit by accident.
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.session import Profile, SessionManager
from auth.store import UserStore
from auth.tokens import TokenCodec
from company.store import CompanyStore

ACCESS_TTL = 300
REFRESH_TTL = 86400

API_EMAIL = "testuser@example.com"
API_PASSWORD = "testpass123"


def memory_db_url(prefix: str) -> str:
    """Return a named shared-memory SQLite URL unique to this call."""
    return f"sqlite:///file:{prefix}_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"


def _make_manager(store: UserStore) -> SessionManager:
    return SessionManager(
        store=store,
        codec=TokenCodec(TEST_SECRET),
        access_ttl_seconds=ACCESS_TTL,
        refresh_ttl_seconds=REFRESH_TTL,
    )


def _patch_lifespan(manager: SessionManager, company_store: CompanyStore):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see
    isolated test DBs rather than the configured database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = manager.store
        app.state.company_store = company_store
        app.state.session_manager = manager
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Unit fixtures -- one database per test
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore(memory_db_url("users"))
    yield store
    store.close()


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(TEST_SECRET)


@pytest.fixture
def session_manager(user_store: UserStore) -> SessionManager:
    return _make_manager(user_store)


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, access_token, user_id) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers but use isolated in-memory stores. The
    user API_EMAIL / API_PASSWORD is registered before the client starts.
    """
    db_url = memory_db_url("api")
    user_store = UserStore(db_url)
    company_store = CompanyStore(db_url)
    manager = _make_manager(user_store)

    user = manager.register(API_EMAIL, API_PASSWORD, Profile(name="Test User"))
    token = manager.login(API_EMAIL, API_PASSWORD).access_token

    app.router.lifespan_context = _patch_lifespan(manager, company_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, user.id

    company_store.close()
    user_store.close()
