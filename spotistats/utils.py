from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Sequence

PLAYLIST_URL_RE = re.compile(r"(?:playlist[/:])([A-Za-z0-9]+)")


def chunks(items: Sequence, n: int) -> Iterator[List]:
    """Yield contiguous slices of at most n items; never yields an empty slice."""
    if n < 1:
        raise ValueError(f"chunk size must be positive, got {n}")
    for i in range(0, len(items), n):
        chunk = list(items[i:i + n])
        if chunk:
            yield chunk


def unique(items: Iterable) -> list:
    """Drop falsy values and duplicates, keeping first-seen order."""
    return list(dict.fromkeys(x for x in items if x))


def parse_playlist_id(value: str) -> str:
    """Accept a bare id, a spotify:playlist: URI or an open.spotify.com URL."""
    value = value.strip()
    m = PLAYLIST_URL_RE.search(value)
    if m:
        return m.group(1)
    return value
