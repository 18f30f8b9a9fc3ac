from __future__ import annotations
import logging
from typing import Callable, Protocol

from messages import Message, MessageName

log = logging.getLogger("sources")

PROGRESS_KEYS = ("id", "elapsed", "duration")


class ScrapeSource(Protocol):
    """A per-site plugin that knows how to read what its player is playing."""

    id: str

    def test(self, url: str) -> bool: ...

    def scrape(self) -> dict | None: ...


class ScrapePoller:
    """Turns scrape results into nowPlaying / updateCurrentTrack messages.

    A stopped or empty scrape sends nothing; the background keepalive then
    retires the track on its own.
    """

    def __init__(self, source: ScrapeSource, post: Callable[[Message], None]):
        self.source = source
        self.post = post
        self.last_id: str | None = None

    def poll(self) -> Message | None:
        try:
            snapshot = self.source.scrape()
        except Exception as e:
            log.warning("%s scrape failed: %s", self.source.id, e)
            self.last_id = None
            return None

        if not snapshot or snapshot.get("stopped") or not snapshot.get("id"):
            # The keepalive may retire the track meanwhile; a resume must start it again
            self.last_id = None
            return None

        snapshot = {k: v for k, v in snapshot.items() if k != "stopped"}
        snapshot.setdefault("host", self.source.id)

        if snapshot["id"] != self.last_id:
            self.last_id = snapshot["id"]
            message = Message(MessageName.NOW_PLAYING, snapshot)
        else:
            # Only playback progress; metadata may have been edited by the user since
            patch = {k: snapshot[k] for k in PROGRESS_KEYS if k in snapshot}
            message = Message(MessageName.UPDATE_CURRENT_TRACK, patch)
        self.post(message)
        return message
