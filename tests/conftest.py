"""
Shared fixtures for the API tests.

Sessions are driven manually through /tick so tests never race a
background ticker thread.
"""

import pytest
from fastapi.testclient import TestClient

import session_store


@pytest.fixture(autouse=True)
def _clean_sessions():
    yield
    session_store.shutdown()


@pytest.fixture
def manual_clock(monkeypatch):
    """Disable the per-session ticker thread."""
    monkeypatch.setattr(session_store, "STATE_CHANGE_BACKGROUND_CLOCK", False)


@pytest.fixture
def client(manual_clock):
    from main import create_app

    with TestClient(create_app()) as c:
        yield c
