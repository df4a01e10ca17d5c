import os
import sys

import pytest

# Ensure project root is on sys.path so 'spotistats' and 'tests' import without install
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from spotistats.auth import TokenProvider
from spotistats.config import Settings
from tests.stubs import OAuthStub

NOW = 1_700_000_000.0


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Clean, predictable environment for every test."""
    for name in ("SPOTIPY_REDIRECT_URI", "SPOTIPY_REFRESH_TOKEN", "SESSION_SECRET",
                 "SPOTISTATS_SERVER_PORT", "SPOTISTATS_REQUEST_TIMEOUT", "SPOTISTATS_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SPOTIPY_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("SPOTIPY_CLIENT_SECRET", "test-client-secret")
    yield


@pytest.fixture
def settings():
    return Settings(client_id="test-client-id", client_secret="test-client-secret",
                    session_secret="test-secret")


@pytest.fixture
def oauth():
    return OAuthStub()


@pytest.fixture
def token_provider(oauth):
    return TokenProvider(oauth, clock=lambda: NOW)


@pytest.fixture
def session():
    """A session holding a token that is valid for another hour."""
    return {"access_token": "valid-token", "refresh_token": "refresh-1", "expires_at": NOW + 3600}
