"""
Shapes computed playlist statistics into the analysis response.

Pure functions, no I/O.
"""

from __future__ import annotations

import re
from typing import Optional

DURATION_RE = re.compile(r"^(?:(\d+)h )?(\d+)m (\d+)s$")


def format_duration(ms: int) -> str:
    """Milliseconds to "1h 2m 3s"; the hour part is dropped when zero."""
    s = int(ms) // 1000
    h, rem = divmod(s, 3600)
    m, sec = divmod(rem, 60)
    return (f"{h}h " if h > 0 else "") + f"{m}m {sec}s"


def parse_duration(text: str) -> int:
    """Inverse of format_duration, in whole seconds."""
    m = DURATION_RE.match(text.strip())
    if not m:
        raise ValueError(f"Not a duration string: {text!r}")
    h, mins, sec = m.groups()
    return int(h or 0) * 3600 + int(mins) * 60 + int(sec)


def owner_label(playlist: dict) -> Optional[str]:
    owner = playlist.get("owner") or {}
    return owner.get("display_name") or owner.get("id") or None


def cover_image(playlist: dict) -> Optional[str]:
    images = playlist.get("images") or []
    if not images or not images[0]:
        return None
    return images[0].get("url") or None


def format_result(playlist: dict, stats: dict) -> dict:
    """Combine playlist header fields and aggregate stats into the response dict.

    `stats` is the output of `analysis.aggregate`.
    """
    duration_ms = stats.get("duration_ms", 0)
    return {
        "playlist": {
            "id": playlist.get("id"),
            "name": playlist.get("name"),
            "owner": owner_label(playlist),
            "total_tracks": stats.get("total_tracks", 0),
            "duration_ms": duration_ms,
            "duration_human": format_duration(duration_ms),
            "image": cover_image(playlist),
        },
        "analysis": {
            "avg_features": stats.get("avg_features", {}),
            "features_count": stats.get("features_count", 0),
            "top_artists": stats.get("top_artists", []),
            "top_tracks": stats.get("top_tracks", []),
            "top_genres": stats.get("top_genres", []),
        },
    }
