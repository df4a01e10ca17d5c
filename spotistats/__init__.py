"""
Spotistats - playlist statistics from the Spotify Web API.

Fetches every track of a playlist, its audio features and artists, and
reports duration totals, top artists, top tracks, top genres and the
average audio-feature vector.

Usage:
    from spotistats import PlaylistAnalyzer, Settings, TokenProvider

    settings = Settings.from_env()
    analyzer = PlaylistAnalyzer(TokenProvider.from_settings(settings), settings=settings)
    result = analyzer.analyze(playlist_id, session)
"""

from .analysis import PlaylistAnalyzer, Stage, aggregate, average_features
from .auth import TokenProvider, build_oauth, store_token
from .client import Spotistats
from .config import (
    ARTISTS_BATCH_SIZE,
    FEATURES_BATCH_SIZE,
    TRACKS_PAGE_SIZE,
    Settings,
)
from .errors import AnalysisFailed, NotAuthenticated, SpotistatsError, UpstreamFetchFailed
from .fetch import BatchResolver, PagedFetcher
from .formatting import format_duration, format_result, parse_duration
from .models import FEATURE_FIELDS, Artist, ArtistRef, AudioFeatures, Track

__version__ = "1.0.0"

__all__ = [
    # Main entry points
    "PlaylistAnalyzer",
    "Spotistats",
    "Stage",
    # Auth
    "TokenProvider",
    "build_oauth",
    "store_token",
    # Configuration
    "Settings",
    "TRACKS_PAGE_SIZE",
    "FEATURES_BATCH_SIZE",
    "ARTISTS_BATCH_SIZE",
    # Fetching
    "PagedFetcher",
    "BatchResolver",
    # Aggregation and formatting
    "aggregate",
    "average_features",
    "format_duration",
    "format_result",
    "parse_duration",
    # Models
    "FEATURE_FIELDS",
    "Track",
    "ArtistRef",
    "Artist",
    "AudioFeatures",
    # Errors
    "SpotistatsError",
    "NotAuthenticated",
    "UpstreamFetchFailed",
    "AnalysisFailed",
]
