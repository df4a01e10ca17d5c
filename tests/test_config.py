import pytest

from spotistats.config import (
    DEFAULT_REDIRECT_URI,
    Settings,
    parse_bool_env,
    parse_int_env,
)


def test_settings_from_env_defaults():
    s = Settings.from_env()

    assert s.client_id == "test-client-id"
    assert s.client_secret == "test-client-secret"
    assert s.redirect_uri == DEFAULT_REDIRECT_URI
    assert s.refresh_token is None
    assert s.session_secret == "change_this"
    assert s.port == 8888
    assert s.requests_timeout == 10
    assert s.debug is False


def test_settings_from_env_overrides(monkeypatch):
    monkeypatch.setenv("SPOTIPY_REDIRECT_URI", "http://127.0.0.1:9000/callback")
    monkeypatch.setenv("SPOTIPY_REFRESH_TOKEN", "refresh")
    monkeypatch.setenv("SESSION_SECRET", "s3cret")
    monkeypatch.setenv("SPOTISTATS_SERVER_PORT", "9000")
    monkeypatch.setenv("SPOTISTATS_DEBUG", "yes")

    s = Settings.from_env()

    assert s.redirect_uri == "http://127.0.0.1:9000/callback"
    assert s.refresh_token == "refresh"
    assert s.session_secret == "s3cret"
    assert s.port == 9000
    assert s.debug is True


@pytest.mark.parametrize("missing", ["SPOTIPY_CLIENT_ID", "SPOTIPY_CLIENT_SECRET"])
def test_missing_client_credentials(monkeypatch, missing):
    monkeypatch.delenv(missing)

    with pytest.raises(RuntimeError, match="SPOTIPY_CLIENT_ID"):
        Settings.from_env()


def test_parse_helpers(monkeypatch):
    monkeypatch.setenv("X_INT", " 42 ")
    monkeypatch.setenv("X_BOOL", "On")
    monkeypatch.setenv("X_BAD", "forty")

    assert parse_int_env("X_INT", 1) == 42
    assert parse_int_env("X_UNSET", 7) == 7
    assert parse_bool_env("X_BOOL") is True
    assert parse_bool_env("X_UNSET", True) is True
    with pytest.raises(RuntimeError):
        parse_int_env("X_BAD", 0)
