"""
Configuration for spotistats.

All environment variables and configuration constants are defined here.
A `.env` file in the project root (or the working directory) is loaded first.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent

env_path = PROJECT_ROOT / ".env"
if env_path.exists():
    load_dotenv(env_path)
else:
    load_dotenv()

# ============================================================================
# PROVIDER LIMITS
# ============================================================================
# Spotify caps these independently; callers may lower them per request.
TRACKS_PAGE_SIZE = 100
FEATURES_BATCH_SIZE = 100
ARTISTS_BATCH_SIZE = 50
USER_PLAYLISTS_LIMIT = 50

# Top-N rankings
TOP_N = 10

# Refresh the access token when it expires within this many seconds
EXPIRY_LEEWAY_SECONDS = 5

DEFAULT_SCOPE = "playlist-read-private playlist-read-collaborative"
DEFAULT_REDIRECT_URI = "http://localhost:8888/callback"


def parse_str_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def parse_int_env(name: str, default: int) -> int:
    value = parse_str_env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {value!r}")


def parse_bool_env(name: str, default: bool = False) -> bool:
    value = parse_str_env(name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the API server, the CLI and the analyzer."""

    client_id: str
    client_secret: str
    redirect_uri: str = DEFAULT_REDIRECT_URI
    scope: str = DEFAULT_SCOPE
    refresh_token: Optional[str] = None
    session_secret: str = "change_this"
    port: int = 8888
    requests_timeout: int = 10
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        cid = parse_str_env("SPOTIPY_CLIENT_ID")
        secret = parse_str_env("SPOTIPY_CLIENT_SECRET")
        if not (cid and secret):
            raise RuntimeError("Set SPOTIPY_CLIENT_ID and SPOTIPY_CLIENT_SECRET")
        return cls(
            client_id=cid,
            client_secret=secret,
            redirect_uri=parse_str_env("SPOTIPY_REDIRECT_URI", DEFAULT_REDIRECT_URI),
            refresh_token=parse_str_env("SPOTIPY_REFRESH_TOKEN"),
            session_secret=parse_str_env("SESSION_SECRET", "change_this"),
            port=parse_int_env("SPOTISTATS_SERVER_PORT", 8888),
            requests_timeout=parse_int_env("SPOTISTATS_REQUEST_TIMEOUT", 10),
            debug=parse_bool_env("SPOTISTATS_DEBUG", False),
        )
