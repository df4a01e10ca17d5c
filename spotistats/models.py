"""
Typed views over Spotify Web API payloads.

Objects are built once from the provider response and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

FEATURE_FIELDS = (
    "danceability",
    "energy",
    "valence",
    "tempo",
    "acousticness",
    "instrumentalness",
    "liveness",
    "speechiness",
)


@dataclass(frozen=True)
class ArtistRef:
    """Artist as credited on a track (simplified artist object)."""
    id: Optional[str]
    name: Optional[str]

    @property
    def label(self) -> Optional[str]:
        return self.name or self.id


@dataclass(frozen=True)
class Track:
    id: Optional[str]
    name: Optional[str]
    duration_ms: int = 0
    popularity: int = 0
    artists: tuple = field(default_factory=tuple)

    @classmethod
    def from_api(cls, t: dict) -> "Track":
        artists = tuple(
            ArtistRef(id=a.get("id"), name=a.get("name"))
            for a in (t.get("artists") or [])
            if a
        )
        return cls(
            id=t.get("id") or None,
            name=t.get("name"),
            duration_ms=int(t.get("duration_ms") or 0),
            popularity=int(t.get("popularity") or 0),
            artists=artists,
        )

    @property
    def artist_names(self) -> str:
        return ", ".join(a.name or "" for a in self.artists)


@dataclass(frozen=True)
class Artist:
    id: str
    name: Optional[str]
    genres: tuple = field(default_factory=tuple)
    popularity: int = 0

    @classmethod
    def from_api(cls, a: dict) -> "Artist":
        return cls(
            id=a["id"],
            name=a.get("name"),
            genres=tuple(a.get("genres") or ()),
            popularity=int(a.get("popularity") or 0),
        )


@dataclass(frozen=True)
class AudioFeatures:
    """Audio feature vector of one track. Fields the provider omits are None."""
    id: str
    danceability: Optional[float] = None
    energy: Optional[float] = None
    valence: Optional[float] = None
    tempo: Optional[float] = None
    acousticness: Optional[float] = None
    instrumentalness: Optional[float] = None
    liveness: Optional[float] = None
    speechiness: Optional[float] = None

    @classmethod
    def from_api(cls, af: dict) -> "AudioFeatures":
        return cls(id=af["id"], **{k: af.get(k) for k in FEATURE_FIELDS})

    def as_dict(self) -> dict:
        return {k: getattr(self, k) for k in FEATURE_FIELDS}
