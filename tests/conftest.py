"""
tests/conftest.py -- Shared test fixtures for fintrack integration tests.

This module provides:
  - engine / user_store / ledger: a fresh named shared-memory SQLite database
    per test, with both stores' tables created
  - _patch_lifespan(): wires the test stores into app.state, bypassing real startup
  - api_client: TestClient for JSON API tests (no cookie set)
  - web_client: TestClient with follow_redirects=False for page and gate tests
  - user / login_as: a registered account and a helper that puts its
    auth-token cookie into a client's cookie jar

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

DEBUG and ALLOWED_HOSTS must be set before any api/auth/core import:
get_settings() is cached on first call, DEBUG lets it auto-generate
SECRET_KEY (and turns Secure cookies off so the http:// test client keeps
them), and TestClient sends Host: testserver.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.limiter import limiter
from asgi import app
from auth.models import User
from auth.store import UserStore
from auth.tokens import COOKIE_NAME, create_access_token, hash_password
from core.database import create_db_engine
from ledger.store import LedgerStore

TEST_PASSWORD = "Correct1horse"


def _patch_lifespan(engine: Engine, user_store: UserStore, ledger: LedgerStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.engine = engine
        app.state.user_store = user_store
        app.state.ledger = ledger
        yield

    return test_lifespan


@pytest.fixture(autouse=True)
def _reset_rate_limits() -> None:
    """Every test starts with empty slowapi counters (all clients share one IP)."""
    limiter.reset()


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    url = f"sqlite:///file:fintrack_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    eng = create_db_engine(url)
    yield eng
    eng.dispose()


@pytest.fixture()
def user_store(engine: Engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture()
def ledger(engine: Engine) -> LedgerStore:
    return LedgerStore(engine)


@pytest.fixture()
def api_client(engine: Engine, user_store: UserStore, ledger: LedgerStore) -> Generator[TestClient, None, None]:
    app.router.lifespan_context = _patch_lifespan(engine, user_store, ledger)
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client


@pytest.fixture()
def web_client(engine: Engine, user_store: UserStore, ledger: LedgerStore) -> Generator[TestClient, None, None]:
    """TestClient that does not follow redirects.

    Gate and form tests assert on the Location header, which is invisible
    once the client follows the redirect.
    """
    app.router.lifespan_context = _patch_lifespan(engine, user_store, ledger)
    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as client:
        yield client


@pytest.fixture()
def user(user_store: UserStore) -> User:
    """A registered account whose password is TEST_PASSWORD."""
    uid = user_store.create_user(
        User(
            email="ada@example.com",
            password_hash=hash_password(TEST_PASSWORD),
            first_name="Ada",
            last_name="Lovelace",
        )
    )
    return user_store.get_by_id(uid)


@pytest.fixture()
def login_as() -> Callable[[TestClient, int], str]:
    """Return a helper that signs a client in as user_id without going through /login."""

    def _login(client: TestClient, user_id: int) -> str:
        token = create_access_token(user_id)
        client.cookies.set(COOKIE_NAME, token)
        return token

    return _login
