"""
Playlist analysis: fetch a playlist's tracks, their audio features and their
artists, then compute aggregate statistics.

Usage:
    provider = TokenProvider.from_settings(settings)
    analyzer = PlaylistAnalyzer(provider, settings=settings)
    result = analyzer.analyze("37i9dQZF1DXcBWIGoYBM5M", session)
"""

from __future__ import annotations

import logging
from collections import Counter
from enum import Enum
from typing import Callable, Dict, List, Mapping, MutableMapping, Optional, Sequence

import pandas as pd

from .auth import TokenProvider
from .client import Spotistats
from .config import (
    ARTISTS_BATCH_SIZE,
    FEATURES_BATCH_SIZE,
    TOP_N,
    TRACKS_PAGE_SIZE,
    Settings,
)
from .errors import AnalysisFailed, SpotistatsError
from .formatting import format_result
from .models import FEATURE_FIELDS, Artist, AudioFeatures, Track
from .utils import unique

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    FETCH_METADATA = "fetch_metadata"
    FETCH_TRACKS = "fetch_tracks"
    FETCH_FEATURES = "fetch_features"
    FETCH_ARTISTS = "fetch_artists"
    AGGREGATE = "aggregate"
    DONE = "done"
    FAILED = "failed"


def average_features(rows: Sequence[AudioFeatures]) -> Dict[str, float]:
    """Per-field mean over tracks that have a feature record, to 3 decimals.

    Missing fields contribute nothing to the sum but the track still counts.
    Returns {} when there are no rows.
    """
    if not rows:
        return {}
    frame = pd.DataFrame([r.as_dict() for r in rows], columns=list(FEATURE_FIELDS)).astype(float)
    sums = frame.sum()
    return {k: round(float(sums[k]) / len(rows), 3) for k in FEATURE_FIELDS}


def aggregate(
    tracks: Sequence[Track],
    features: Mapping[str, AudioFeatures],
    artists: Mapping[str, Artist],
    top_n: int = TOP_N,
) -> dict:
    """Compute playlist statistics in a single pass over the tracks."""
    total_ms = 0
    artist_count: Counter = Counter()
    feature_rows: List[AudioFeatures] = []
    ranking = []

    for t in tracks:
        total_ms += t.duration_ms
        ranking.append({
            "id": t.id,
            "name": t.name,
            "artists": t.artist_names,
            "popularity": t.popularity,
        })
        for a in t.artists:
            if not a.id:
                continue
            artist_count[a.label] += 1
        af = features.get(t.id) if t.id else None
        if af is not None:
            feature_rows.append(af)

    # Once per resolved artist, not per track credit
    genre_count: Counter = Counter()
    for artist in artists.values():
        genre_count.update(artist.genres)

    # most_common and sorted are stable: ties keep first-seen order
    return {
        "total_tracks": len(tracks),
        "duration_ms": total_ms,
        "avg_features": average_features(feature_rows),
        "features_count": len(feature_rows),
        "top_artists": [{"name": n, "count": c} for n, c in artist_count.most_common(top_n)],
        "top_tracks": sorted(ranking, key=lambda r: r["popularity"], reverse=True)[:top_n],
        "top_genres": [{"genre": g, "count": c} for g, c in genre_count.most_common(top_n)],
    }


class PlaylistAnalyzer:
    """Runs the analysis stages for one playlist per call.

    Stages run strictly in order; the first failure aborts the rest and is
    raised with `stage` set to where it happened. No state is kept between
    calls.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        client_factory: Optional[Callable[[str], Spotistats]] = None,
        settings: Optional[Settings] = None,
        page_size: int = TRACKS_PAGE_SIZE,
        features_batch_size: int = FEATURES_BATCH_SIZE,
        artists_batch_size: int = ARTISTS_BATCH_SIZE,
        progress: bool = False,
    ):
        self.token_provider = token_provider
        self.settings = settings
        self.progress = progress
        self.client_factory = client_factory or self._default_client
        self.page_size = page_size
        self.features_batch_size = features_batch_size
        self.artists_batch_size = artists_batch_size

    def _default_client(self, token: str) -> Spotistats:
        return Spotistats.from_token(token, self.settings, progress=self.progress)

    def analyze(self, playlist_id: str, session: Optional[MutableMapping]) -> dict:
        # stage stays None until credentials are resolved
        stage: Optional[Stage] = None
        try:
            token = self.token_provider.get_valid_token(session)
            client = self.client_factory(token)

            stage = Stage.FETCH_METADATA
            logger.info("Analyzing playlist %s", playlist_id)
            playlist = client.playlist(playlist_id)

            stage = Stage.FETCH_TRACKS
            tracks = [Track.from_api(t) for t in client.playlist_tracks(playlist_id, limit=self.page_size)]
            logger.info("Fetched %d track(s)", len(tracks))

            stage = Stage.FETCH_FEATURES
            track_ids = [t.id for t in tracks if t.id]
            features = {
                tid: AudioFeatures.from_api(rec)
                for tid, rec in client.audio_features(track_ids, batch_size=self.features_batch_size).items()
            }

            stage = Stage.FETCH_ARTISTS
            artist_ids = unique(a.id for t in tracks for a in t.artists)
            artists = {
                aid: Artist.from_api(rec)
                for aid, rec in client.artists(artist_ids, batch_size=self.artists_batch_size).items()
            }

            stage = Stage.AGGREGATE
            result = format_result(playlist, aggregate(tracks, features, artists))
        except SpotistatsError as err:
            err.stage = stage.value if stage else None
            logger.error("Analysis of %s failed during %s: %s",
                         playlist_id, err.stage or "authentication", err)
            raise
        except Exception as err:
            where = stage.value if stage else "authentication"
            logger.exception("Analysis of %s failed during %s", playlist_id, where)
            failure = AnalysisFailed(f"Analysis failed during {where}", detail=str(err))
            failure.stage = stage.value if stage else None
            raise failure from err

        logger.info("Analysis of %s %s: %d tracks, %d with features",
                    playlist_id, Stage.DONE.value,
                    result["playlist"]["total_tracks"], result["analysis"]["features_count"])
        return result
