from __future__ import annotations
from dataclasses import dataclass


class BackendError(Exception):
    """A reporting backend could not deliver a song."""


# -------------------------
# What gets reported for a scrobbled track
# -------------------------
@dataclass(frozen=True)
class Song:
    artist: str
    title: str
    timestamp: int              # unix seconds, start of play
    album: str | None = None
    image: str | None = None

    @classmethod
    def from_track(cls, track, image: str | None = None) -> Song:
        return cls(
            artist=track.artist,
            title=track.title,
            timestamp=round(track.date_time / 1000),
            album=track.album or None,
            image=image,
        )

    @property
    def byline(self) -> str:
        """"artist - album", or just the artist when the album is unknown."""
        return f"{self.artist} - {self.album}" if self.album else self.artist
