"""
Credential store and token refresh.

Credentials live in a per-user session mapping (Flask's cookie session in the
web app, a plain dict in the CLI and tests). `TokenProvider` reads them and
refreshes the access token when it is about to expire. Two concurrent
requests may both refresh; the provider hands out a valid token either way and
the last write to the session wins.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, MutableMapping, Optional

from spotipy.cache_handler import MemoryCacheHandler
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from .config import EXPIRY_LEEWAY_SECONDS, Settings
from .errors import NotAuthenticated
from .upstream import upstream_call

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
EXPIRES_AT_KEY = "expires_at"


def build_oauth(settings: Settings, show_dialog: bool = True) -> SpotifyOAuth:
    """SpotifyOAuth that never touches the on-disk token cache."""
    return SpotifyOAuth(
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        redirect_uri=settings.redirect_uri,
        scope=settings.scope,
        show_dialog=show_dialog,
        open_browser=False,
        cache_handler=MemoryCacheHandler(),
        requests_timeout=settings.requests_timeout,
    )


def store_token(session: MutableMapping, token_info: dict, now: Optional[float] = None) -> None:
    """Write a token response (code exchange or refresh) into the session."""
    now = time.time() if now is None else now
    session[ACCESS_TOKEN_KEY] = token_info["access_token"]
    if token_info.get("refresh_token"):
        session[REFRESH_TOKEN_KEY] = token_info["refresh_token"]
    session[EXPIRES_AT_KEY] = now + int(token_info.get("expires_in") or 3600)


class TokenProvider:
    """Hands out a valid bearer token for a session, refreshing when needed."""

    def __init__(self, oauth: SpotifyOAuth, leeway: float = EXPIRY_LEEWAY_SECONDS,
                 clock: Callable[[], float] = time.time):
        self.oauth = oauth
        self.leeway = leeway
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenProvider":
        return cls(build_oauth(settings))

    def is_expiring(self, session: MutableMapping) -> bool:
        expires_at = session.get(EXPIRES_AT_KEY) or 0
        return self.clock() >= expires_at - self.leeway

    def get_valid_token(self, session: Optional[MutableMapping]) -> str:
        if not session or not session.get(ACCESS_TOKEN_KEY):
            raise NotAuthenticated("No Spotify credentials in session")
        if not self.is_expiring(session):
            return session[ACCESS_TOKEN_KEY]
        return self.refresh(session)

    def refresh(self, session: MutableMapping) -> str:
        refresh_token = session.get(REFRESH_TOKEN_KEY)
        if not refresh_token:
            raise NotAuthenticated("Access token expired and no refresh token is stored")

        logger.debug("Refreshing Spotify access token")
        try:
            token_info = upstream_call(self.oauth.refresh_access_token, refresh_token)
        except SpotifyOauthError as e:
            logger.error("Error refreshing Spotify access token: %s", e)
            raise NotAuthenticated(
                "Could not refresh Spotify access token",
                detail={"message": str(e), "description": getattr(e, "error_description", None)},
            ) from e

        store_token(session, token_info, now=self.clock())
        return session[ACCESS_TOKEN_KEY]
