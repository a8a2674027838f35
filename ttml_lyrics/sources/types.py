from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class LookupRecord:
    """One lrclib search result."""
    id: int | None
    name: str
    track_name: str | None
    artist_name: str
    album_name: str | None = None
    duration: float | None = None
    synced_lyrics: str | None = None
    plain_lyrics: str | None = None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "LookupRecord":
        return cls(
            id=item.get("id"),
            name=item.get("name") or "",
            track_name=item.get("trackName"),
            artist_name=item.get("artistName") or "",
            album_name=item.get("albumName"),
            duration=item.get("duration"),
            synced_lyrics=item.get("syncedLyrics"),
            plain_lyrics=item.get("plainLyrics"),
        )

    @property
    def display_name(self) -> str:
        return self.track_name or self.name

    @property
    def has_synced_lyrics(self) -> bool:
        return bool(self.synced_lyrics and self.synced_lyrics.strip())

    @property
    def has_plain_lyrics(self) -> bool:
        return bool(self.plain_lyrics and self.plain_lyrics.strip())
