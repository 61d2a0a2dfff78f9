"""
tests/conftest.py -- Shared test fixtures for TaskMarket integration tests.

This module provides:
  - _make_test_stores(): isolated in-memory UserStore + MarketStore on one DB
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus an admin JWT for API integration tests
  - make_worker: registers and logs in a worker through the real API

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool, and because the
two stores must see the same database for the submissions foreign keys and
the admin listing join. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

Environment variables must be set before any core/auth import so
get_settings() picks them up: DEBUG auto-generates SECRET_KEY, a low bcrypt
cost keeps registration fast, the login rate limit is raised high enough for a
module that logs in many workers (its counters are reset per module), and the
TestClient host is allowed.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOGIN_RATE_LIMIT", "50/minute")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver"]')

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.models import Role
from auth.store import UserStore
from auth.tokens import create_access_token, register_user
from market.store import MarketStore

ADMIN_EMAIL = "admin@test.local"
ADMIN_PASSWORD = "adminpass123"
WORKER_PASSWORD = "workerpass123"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, MarketStore]:
    """Create a UserStore and a MarketStore sharing one named in-memory DB.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    url = f"sqlite:///file:test_market_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(url), MarketStore(url)


def _patch_lifespan(user_store: UserStore, market: MarketStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.market = market
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, admin_token, admin_id) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers but use an isolated in-memory database.
    The admin is created directly in the store (there is no API path that
    needs one to exist first) and a JWT is issued for Authorization headers.
    """
    user_store, market = _make_test_stores(request.module.__name__.replace(".", "_"))

    admin_id = register_user(user_store, "Test Admin", ADMIN_EMAIL, ADMIN_PASSWORD, Role.admin)
    token = create_access_token(admin_id, ADMIN_EMAIL, Role.admin.value, "Test Admin", expire_seconds=3600)

    limiter.reset()
    app.router.lifespan_context = _patch_lifespan(user_store, market)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, admin_id

    market.close()
    user_store.close()


@pytest.fixture(scope="module")
def make_worker(api_client) -> Callable[..., tuple[str, int]]:
    """Return a helper that registers a worker via the API and logs it in.

    Usage:
        token, user_id = make_worker("w1@test.local", name="Wanda")
    """
    client, _token, _admin_id = api_client

    def _make(email: str, name: str = "Worker") -> tuple[str, int]:
        resp = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": WORKER_PASSWORD},
        )
        assert resp.status_code == 201, resp.text
        user_id = resp.json()["id"]
        login = client.post("/api/auth/login", json={"email": email, "password": WORKER_PASSWORD})
        assert login.status_code == 200, login.text
        return login.json()["token"], user_id

    return _make
