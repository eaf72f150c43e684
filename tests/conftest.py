"""
tests/conftest.py -- Shared test fixtures for Bookshelf tests.

This module provides:
  - _make_test_stores(): isolated in-memory DBs for users + books
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - client: TestClient over the real app, one fresh database per test
  - user_store / hasher / service: unit-level building blocks

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

The token secrets must be in the environment before any Settings() is built.
BCRYPT_ROUNDS=4 keeps the suite fast; the cost-12 policy has its own test.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

from helpers import ACCESS_SECRET, REFRESH_SECRET, FakeClock

# CRITICAL: set secrets before any core/auth/api import builds Settings().
os.environ["ACCESS_TOKEN_SECRET"] = ACCESS_SECRET
os.environ["REFRESH_TOKEN_SECRET"] = REFRESH_SECRET
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient

from api.main import app, wire_state
from auth.cookies import SessionCookies
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import ACCESS, REFRESH, TokenIssuer
from books.store import BookStore
from core.config import Settings, get_settings

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _memory_url(prefix: str) -> str:
    """Unique named shared-memory SQLite URL so tests never share state."""
    return f"sqlite:///file:{prefix}_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"


def _make_test_stores() -> tuple[UserStore, BookStore]:
    db_url = _memory_url("test_bookshelf")
    return UserStore(db_url), BookStore(db_url)


def _patch_lifespan(settings: Settings, user_store: UserStore, book_store: BookStore, clock):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state through the same
    wire_state() the production lifespan uses.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        wire_state(app, settings, user_store, book_store, clock=clock)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore(_memory_url("test_users"))
    yield store
    store.close()


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def service(user_store: UserStore, hasher: PasswordHasher, clock: FakeClock) -> AuthService:
    """AuthService over an in-memory store, with the fake clock on both issuers."""
    return AuthService(
        store=user_store,
        hasher=hasher,
        access_tokens=TokenIssuer(ACCESS_SECRET, 3600, ACCESS, clock),
        refresh_tokens=TokenIssuer(REFRESH_SECRET, 7 * 24 * 3600, REFRESH, clock),
        cookies=SessionCookies(access_max_age=86400, refresh_max_age=604800),
    )


@pytest.fixture
def client(settings: Settings, clock: FakeClock) -> Generator[TestClient, None, None]:
    """TestClient over the real app with a fresh database and the fake clock.

    Function-scoped so every test starts with an empty cookie jar and no users.
    """
    user_store, book_store = _make_test_stores()
    app.router.lifespan_context = _patch_lifespan(settings, user_store, book_store, clock)

    with TestClient(app, raise_server_exceptions=True) as test_client:
        yield test_client

    user_store.close()
    book_store.close()
