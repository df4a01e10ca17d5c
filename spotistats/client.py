"""
Spotistats client - thin wrapper over spotipy for the endpoints playlist
analysis needs.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

import spotipy

from .auth import TokenProvider, build_oauth
from .config import (
    ARTISTS_BATCH_SIZE,
    FEATURES_BATCH_SIZE,
    TRACKS_PAGE_SIZE,
    USER_PLAYLISTS_LIMIT,
    Settings,
)
from .fetch import BatchResolver, PagedFetcher
from .upstream import upstream_call

PLAYLIST_FIELDS = "id,name,owner(id,display_name),images"


class Spotistats:
    """Spotify Web API access scoped to a single bearer credential."""

    def __init__(self, sp: spotipy.Spotify, progress: bool = False):
        self.sp = sp
        self.progress = progress

    # -------------------------
    # Constructors
    # -------------------------
    @classmethod
    def from_token(cls, token: str, settings: Optional[Settings] = None,
                   progress: bool = False) -> "Spotistats":
        # No retries: a single upstream failure is fatal to the invocation.
        timeout = settings.requests_timeout if settings else 10
        sp = spotipy.Spotify(auth=token, requests_timeout=timeout, retries=0, status_retries=0)
        return cls(sp=sp, progress=progress)

    @classmethod
    def from_env(cls, progress: bool = False) -> "Spotistats":
        """Headless client from SPOTIPY_REFRESH_TOKEN (see `spotistats token`)."""
        settings = Settings.from_env()
        if not settings.refresh_token:
            raise RuntimeError("Set SPOTIPY_REFRESH_TOKEN (run `spotistats token` once to get one)")
        session = {"refresh_token": settings.refresh_token}
        token = TokenProvider(build_oauth(settings)).refresh(session)
        return cls.from_token(token, settings, progress=progress)

    # -------------------------
    # User
    # -------------------------
    def me(self) -> dict:
        return upstream_call(self.sp.current_user)

    def playlists(self, limit: int = USER_PLAYLISTS_LIMIT) -> dict:
        """First page of the current user's playlists, as returned by the API."""
        return upstream_call(self.sp.current_user_playlists, limit=limit)

    # -------------------------
    # Playlist analysis inputs
    # -------------------------
    def playlist(self, playlist_id: str) -> dict:
        return upstream_call(self.sp.playlist, playlist_id, fields=PLAYLIST_FIELDS)

    def playlist_tracks(self, playlist_id: str, limit: int = TRACKS_PAGE_SIZE) -> Iterator[dict]:
        """Lazily yields every track object in the playlist, skipping null placeholders."""
        first = upstream_call(
            self.sp.playlist_items,
            playlist_id,
            limit=limit,
            additional_types=("track",),
        )
        return PagedFetcher(self.sp).fetch_all(first)

    def audio_features(self, track_ids: List[str],
                       batch_size: int = FEATURES_BATCH_SIZE) -> Dict[str, dict]:
        resolver = BatchResolver(self._lookup_audio_features, batch_size,
                                 progress=self.progress, desc="Fetching audio features")
        return resolver.resolve(track_ids)

    def artists(self, artist_ids: List[str],
                batch_size: int = ARTISTS_BATCH_SIZE) -> Dict[str, dict]:
        resolver = BatchResolver(self._lookup_artists, batch_size,
                                 progress=self.progress, desc="Fetching artists")
        return resolver.resolve(artist_ids)

    def _lookup_audio_features(self, ids: List[str]) -> list:
        # spotipy unwraps the "audio_features" envelope when it is present
        resp = self.sp.audio_features(ids)
        if isinstance(resp, dict):
            return resp.get("audio_features") or []
        return resp or []

    def _lookup_artists(self, ids: List[str]) -> list:
        resp = self.sp.artists(ids) or {}
        return resp.get("artists") or []
