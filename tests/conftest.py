"""
tests/conftest.py -- Shared test fixtures for the bookstore API tests.

This module provides:
  - make_test_engine(): isolated named shared-memory SQLite engine
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: module-scoped TestClient plus a session token for a seeded user
  - client / auth_client: the same TestClient with the cookie jar reset,
    either empty or holding the seeded user's session cookie
  - seeded_user: credentials of the user registered in every API test DB
  - broken_book_store: a BookStore whose table is gone, for failure paths

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

JWT_SECRET must be set before any application import: Settings refuses to
load without it, and api/main.py loads Settings at import time.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before importing anything from api/, auth/, or core/.
os.environ.setdefault("JWT_SECRET", "test-only-signing-key-0123456789abcdef")
os.environ["LOGIN_RATE_LIMIT"] = "1000/minute"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.engine import Engine

from api.main import app
from auth.store import UserStore
from auth.tokens import create_session_token, register_user
from books.store import BookStore
from core.db import create_db_engine

SEEDED_EMAIL = "reader@example.com"
SEEDED_PASSWORD = "correct horse battery staple"


def make_test_engine(db_suffix: str) -> Engine:
    """Return an engine on a named shared-memory SQLite database.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return create_db_engine(f"sqlite:///file:test_bookstore_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(engine: Engine, book_store: BookStore, user_store: UserStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.engine = engine
        app.state.book_store = book_store
        app.state.user_store = user_store
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str], None, None]:
    """Yield (client, token) for API integration tests.

    A user (SEEDED_EMAIL / SEEDED_PASSWORD) is registered before the client
    starts; token is a valid session token for that user.
    """
    engine = make_test_engine(request.module.__name__.replace(".", "_"))
    book_store = BookStore(engine)
    user_store = UserStore(engine)
    register_user(user_store, SEEDED_EMAIL, SEEDED_PASSWORD)
    token = create_session_token(SEEDED_EMAIL)

    app.router.lifespan_context = _patch_lifespan(engine, book_store, user_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token

    engine.dispose()


@pytest.fixture(scope="session")
def seeded_user() -> tuple[str, str]:
    """(email, password) of the user every api_client database starts with."""
    return SEEDED_EMAIL, SEEDED_PASSWORD


@pytest.fixture
def broken_book_store() -> Generator[BookStore, None, None]:
    """A BookStore whose books table has been dropped, so every query fails."""
    engine = make_test_engine("broken_books")
    store = BookStore(engine)
    with engine.connect() as conn:
        conn.execute(text("DROP TABLE books"))
        conn.commit()
    yield store
    engine.dispose()


@pytest.fixture
def client(api_client: tuple[TestClient, str]) -> TestClient:
    """The shared TestClient with an empty cookie jar (unauthenticated)."""
    c, _token = api_client
    c.cookies.clear()
    return c


@pytest.fixture
def auth_client(api_client: tuple[TestClient, str]) -> TestClient:
    """The shared TestClient carrying the seeded user's session cookie."""
    c, token = api_client
    c.cookies.clear()
    c.cookies.set("auth", token)
    return c
