"""
tests/conftest.py -- Shared test fixtures for Storefront tests.

This module provides:
  - _make_test_stores(): isolated in-memory DBs for accounts + catalog
  - _patch_lifespan(): wires test services into app.state, bypassing real startup
  - api_client: TestClient plus a registered account and its session token
  - client: the same TestClient with an empty cookie jar for each test

Named shared-memory SQLite URIs (not plain :memory:) are required because
TestClient runs sync route handlers in a thread pool. Plain :memory: DBs are
per-connection and would present a blank schema to each worker thread.

DEBUG must be set before any api/core import so get_settings() generates a
SECRET_KEY instead of raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# Set DEBUG before any api/core import.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.passwords import PasswordHasher
from auth.store import AccountStore
from auth.tokens import TokenService
from catalog.store import StoreCatalog
from core.config import get_settings

TEST_EMAIL = "testuser@example.com"
TEST_PASSWORD = "Testpass1!"

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[AccountStore, StoreCatalog]:
    """Create isolated named shared-memory SQLite stores.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    url = f"sqlite:///file:test_storefront_{db_suffix}?mode=memory&cache=shared&uri=true"
    return AccountStore(db_url=url), StoreCatalog(db_url=url)


def _patch_lifespan(account_store: AccountStore, catalog: StoreCatalog, hasher: PasswordHasher, tokens: TokenService):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = get_settings()
        app.state.password_hasher = hasher
        app.state.token_service = tokens
        app.state.account_store = account_store
        app.state.catalog = catalog
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def hasher() -> PasswordHasher:
    """Cheapest bcrypt cost so tests stay fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def account_store() -> Generator[AccountStore, None, None]:
    store = AccountStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, str, str], None, None]:
    """Yield (client, token, account_id) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers but use isolated in-memory stores and the secret
    from the test Settings.
    """
    account_store, catalog = _make_test_stores("api")
    hasher = PasswordHasher(rounds=4)
    tokens = TokenService(get_settings().secret_key)

    account_id = account_store.create_account(TEST_EMAIL, hasher.hash(TEST_PASSWORD))
    token = tokens.issue(account_id, TEST_EMAIL)

    app.router.lifespan_context = _patch_lifespan(account_store, catalog, hasher, tokens)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, account_id

    account_store.close()
    catalog.close()


@pytest.fixture
def client(api_client: tuple[TestClient, str, str]) -> TestClient:
    """The shared TestClient with no session cookie left over from earlier tests."""
    test_client, _token, _account_id = api_client
    test_client.cookies.clear()
    return test_client
