"""
Single seam for calls into the Spotify Web API.

Translates spotipy and transport failures into `UpstreamFetchFailed` so the
rest of the package only deals with its own error taxonomy.
"""

from __future__ import annotations

import logging
from typing import Callable

import requests
from spotipy.exceptions import SpotifyException

from .errors import UpstreamFetchFailed

logger = logging.getLogger(__name__)


def upstream_call(func: Callable, *args, **kwargs):
    """Call a spotipy method, raising UpstreamFetchFailed on any failure."""
    try:
        return func(*args, **kwargs)
    except SpotifyException as e:
        detail = {
            "status": e.http_status,
            "code": e.code,
            "message": e.msg,
        }
        if getattr(e, "reason", None):
            detail["reason"] = e.reason
        logger.error("Spotify API error %s: %s", e.http_status, e.msg)
        raise UpstreamFetchFailed(
            f"Spotify API returned {e.http_status}", detail=detail, http_status=e.http_status
        ) from e
    except requests.RequestException as e:
        logger.error("Spotify API transport error: %s", e)
        raise UpstreamFetchFailed(
            "Spotify API unreachable", detail={"status": None, "message": str(e)}
        ) from e
