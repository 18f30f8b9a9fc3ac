from __future__ import annotations
import logging
from typing import Callable, Iterable

import notifier
import notifier_room
import lastfm_client
from eligibility import should_scrobble
from song import BackendError, Song
from state import Track, TrackStatus

log = logging.getLogger("dispatcher")

# name -> factory(settings) returning a backend with send(song), or None if unconfigured
BackendFactory = Callable[[object], object]

DEFAULT_BACKENDS: dict[str, BackendFactory] = {
    "slack": notifier.from_settings,
    "room": notifier_room.from_settings,
    "lastfm": lastfm_client.from_settings,
}


class NotificationDispatcher:
    """Reports eligible tracks to every enabled backend.

    A track is marked scrobbled before anything goes out: a failed POST loses
    that report rather than risking a duplicate on the next pass.
    """

    def __init__(self, settings, enrichment=None, backends: dict[str, BackendFactory] | None = None):
        self.settings = settings
        self.enrichment = enrichment
        self.backends = DEFAULT_BACKENDS if backends is None else backends

    def _enabled_backends(self) -> list:
        # Resolved per dispatch so settings changes apply without a restart
        out = []
        for name, factory in self.backends.items():
            if not self.settings.enabled(name):
                continue
            try:
                backend = factory(self.settings)
            except Exception as e:
                log.warning("Could not set up %s backend: %s", name, e)
                continue
            if backend is not None:
                out.append((name, backend))
        return out

    def _image_for(self, track: Track) -> str | None:
        if self.enrichment is None or not self.enrichment.supported:
            return None
        try:
            return self.enrichment.lookup(track.artist, album=track.album, title=track.title)
        except Exception as e:
            log.debug("Cover art lookup failed for %s: %s", track.id, e)
            return None

    def dispatch(self, track: Track) -> list[str]:
        """Report one track; returns the backends that accepted it."""
        track.scrobbled = True
        track.move_to(TrackStatus.SCROBBLED)

        song = Song.from_track(track, image=self._image_for(track))
        delivered = []
        for name, backend in self._enabled_backends():
            try:
                backend.send(song)
                delivered.append(name)
            except BackendError as e:
                log.warning("%s: %s", name, e)
            except Exception:
                log.exception("Unexpected error in %s backend", name)

        log.info("Scrobbled: %s — %s%s -> %s", song.artist, song.title,
                 f" [{song.album}]" if song.album else "", ", ".join(delivered) or "nothing delivered")
        return delivered

    def scrobble_pass(self, tracks: Iterable[Track | None]) -> int:
        """Dispatch every not-yet-scrobbled track that qualifies."""
        if not self.settings.enabled("scrobbling"):
            return 0
        sent = 0
        for track in tracks:
            if track is None or track.scrobbled:
                continue
            if should_scrobble(track, self.settings):
                self.dispatch(track)
                sent += 1
        return sent
