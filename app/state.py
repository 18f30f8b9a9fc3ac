import copy
import enum
import logging
import time
from collections import deque
from dataclasses import dataclass, field

log = logging.getLogger("state")

HISTORY_LIMIT = 25

# wire key -> attribute
_WIRE_KEYS = {
    "id": "id",
    "artist": "artist",
    "title": "title",
    "album": "album",
    "host": "host",
    "duration": "duration",
    "elapsed": "elapsed",
    "dateTime": "date_time",
    "scrobbled": "scrobbled",
    "noscrobble": "noscrobble",
    "editrequired": "editrequired",
}


class TrackStatus(str, enum.Enum):
    NEW = "new"
    NEEDS_EDIT = "needs_edit"
    READY = "ready"
    SCROBBLED = "scrobbled"
    SUPPRESSED = "suppressed"
    SUPERSEDED = "superseded"

    @property
    def terminal(self) -> bool:
        return self in (TrackStatus.SCROBBLED, TrackStatus.SUPPRESSED, TrackStatus.SUPERSEDED)


def _now_ms() -> int:
    return int(time.time() * 1000)


# -------------------------
# One playing track, as reported by a scrape source
# -------------------------
@dataclass
class Track:
    id: str
    artist: str | None = None
    title: str | None = None
    album: str | None = None
    host: str | None = None
    duration: int | None = None   # ms
    elapsed: int | None = None    # ms
    date_time: int = field(default_factory=_now_ms)  # ms epoch, start of play
    scrobbled: bool = False
    noscrobble: bool = False
    editrequired: bool = False
    status: TrackStatus = TrackStatus.NEW

    @classmethod
    def from_snapshot(cls, data: dict) -> "Track":
        if data.get("id") is None:
            raise ValueError("track snapshot without id")
        kwargs = {attr: data[key] for key, attr in _WIRE_KEYS.items() if data.get(key) is not None}
        return cls(**kwargs)

    def to_dict(self) -> dict:
        out = {key: getattr(self, attr) for key, attr in _WIRE_KEYS.items()}
        out["status"] = self.status.value
        return out

    def snapshot(self) -> "Track":
        return copy.copy(self)

    def move_to(self, status: TrackStatus) -> None:
        if self.status.terminal and status != self.status:
            log.debug("Track %s already %s; ignoring move to %s", self.id, self.status.value, status.value)
            return
        self.status = status


class TrackStateStore:
    """Owns the current track and the bounded play history.

    Only the background context holds one of these; UI contexts see copies
    pushed to them and ask for changes by message.
    """

    def __init__(self, settings, history_limit: int = HISTORY_LIMIT):
        self.settings = settings
        self._current: Track | None = None
        self._history: deque[Track] = deque(maxlen=history_limit)

    @property
    def current_track(self) -> Track | None:
        return self._current

    @property
    def history(self) -> tuple[Track, ...]:
        return tuple(self._history)

    def state(self) -> dict:
        return {
            "currentTrack": self._current.to_dict() if self._current else None,
            "history": [t.to_dict() for t in self._history],
        }

    def update_now_playing(self, snapshot: dict | Track) -> Track | None:
        """Make a newly reported track current. Returns it, or None if ignored."""
        track = snapshot.snapshot() if isinstance(snapshot, Track) else Track.from_snapshot(snapshot)

        if self._current is not None and track.id == self._current.id:
            return None
        if not self.settings.enabled(track.host):
            log.debug("Host %s disabled; dropping %s", track.host, track.id)
            return None

        self.finalize()

        if not track.artist:
            track.editrequired = True
            track.noscrobble = True
            track.status = TrackStatus.NEEDS_EDIT
        else:
            track.status = TrackStatus.READY

        self._current = track
        # deque(maxlen) drops the oldest entry once full
        self._history.append(track.snapshot())
        log.info("Now playing [%s]: %s — %s", track.host, track.artist or "?", track.title or "?")
        return track

    def update_current_track(self, patch: dict) -> bool:
        current = self._current
        if current is None or patch.get("id") != current.id:
            return False

        for key, value in patch.items():
            attr = _WIRE_KEYS.get(key)
            if attr is None or attr == "id":
                continue
            if attr == "elapsed":
                # Players sometimes reset elapsed before the next track starts
                if current.elapsed and (value is None or value <= current.elapsed):
                    continue
            setattr(current, attr, value)
        return True

    def set_noscrobble(self, value: bool | None = None) -> bool | None:
        """Flip the current track's noscrobble flag, or set it when given."""
        if self._current is None:
            return None
        self._current.noscrobble = (not self._current.noscrobble) if value is None else bool(value)
        return self._current.noscrobble

    def resolve_edit_required(self) -> bool:
        """Clear the edit-required state; True when a notification should fire."""
        current = self._current
        if current is None or not current.editrequired:
            return False
        current.editrequired = False
        current.noscrobble = False
        current.move_to(TrackStatus.READY)
        return True

    def finalize(self) -> Track | None:
        """Detach the current track, settling its terminal status."""
        track = self._current
        if track is None:
            return None
        self._current = None
        if track.scrobbled:
            track.move_to(TrackStatus.SCROBBLED)
        elif track.noscrobble:
            track.move_to(TrackStatus.SUPPRESSED)
        else:
            track.move_to(TrackStatus.SUPERSEDED)
        log.debug("Finalized %s as %s", track.id, track.status.value)
        return track

