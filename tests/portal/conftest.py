"""Fixtures for portal client tests: a temp store and a mocked API."""

import httpx
import pytest

from portal.session import AUTH_TOKEN, AUTH_USER, AuthSession, LocalStore
from tests.portal.mock_api import API_URL


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "portal.json")


@pytest.fixture
def make_session(store):
    """Build an AuthSession whose API calls go to ``handler``."""

    def _make(handler, user: dict | None = None, token: str | None = "token-123"):
        if user is not None:
            store.set(AUTH_USER, user)
        if token is not None:
            store.set(AUTH_TOKEN, token)
        return AuthSession(store=store, base_url=API_URL, transport=httpx.MockTransport(handler))

    return _make
