import logging
from typing import Any, Callable

from keepalive import Keepalive
from messages import Message, MessageName
from sources import PROGRESS_KEYS

log = logging.getLogger("coordinator")


class BackgroundCoordinator:
    """Routes inbound messages to the state store, dispatcher and UI.

    Runs on the background context's single loop: one message is handled to
    completion before the next. Nothing here is fatal; a failing handler is
    logged and the next message is processed as usual.
    """

    def __init__(self, store, dispatcher, transport, notifications, keepalive: Keepalive | None = None):
        self.store = store
        self.dispatcher = dispatcher
        self.transport = transport
        self.notifications = notifications
        self.keepalive = keepalive or Keepalive()
        self.handlers: dict[MessageName, Callable[[Any], None]] = {
            MessageName.NOW_PLAYING: self.on_now_playing,
            MessageName.UPDATE_CURRENT_TRACK: self.on_update_current_track,
            MessageName.TRACK_EDITED: self.on_track_edited,
            MessageName.DO_NOT_SCROBBLE_BUTTON_CLICKED: self.on_do_not_scrobble,
            MessageName.POPUP_SETTINGS_CHANGED: self.on_popup_settings_changed,
        }
        transport.on_receive(self.handle)

    def send(self, name: MessageName, message: Any = None) -> None:
        self.transport.send(Message(name, message))

    def handle(self, raw) -> None:
        message = Message.parse(raw)
        if message is None:
            return
        log.debug("%s %r", message.name.value, message.message)
        handler = self.handlers.get(message.name)
        if handler is None:
            return
        try:
            handler(message.message)
        except Exception:
            log.exception("Handling %s failed", message.name.value)

    # -------- handlers --------
    def scrobble_current(self) -> None:
        self.dispatcher.scrobble_pass([self.store.current_track])

    def on_now_playing(self, snapshot: dict) -> None:
        # Last chance for the outgoing track before it is superseded
        self.scrobble_current()
        track = self.store.update_now_playing(snapshot)
        if track is None:
            current = self.store.current_track
            if current is not None and isinstance(snapshot, dict) and snapshot.get("id") == current.id:
                # Same track reported again (e.g. resumed after a pause): keep its progress
                self.on_update_current_track({k: snapshot[k] for k in PROGRESS_KEYS if k in snapshot})
            return
        self.keepalive.reset()
        if track.editrequired:
            self.send(MessageName.TRACK_EDIT_REQUIRED)
        else:
            self.notifications.notify("Now Playing", f"{track.artist} - {track.title}")
        self.scrobble_current()

    def on_update_current_track(self, patch: dict) -> None:
        if self.store.update_current_track(patch or {}):
            self.keepalive.reset()
            self.scrobble_current()

    def on_track_edited(self, patch: dict) -> None:
        if self.store.update_current_track(patch or {}):
            self.keepalive.reset()
        if self.store.resolve_edit_required():
            track = self.store.current_track
            self.notifications.notify("Now Playing", f"{track.artist} - {track.title}")
        self.send(MessageName.TRACK_EDIT_SAVED)

    def on_do_not_scrobble(self, _message=None) -> None:
        self.store.set_noscrobble()
        self.send(MessageName.TRACK_NO_SCROBBLE_SET)

    def on_popup_settings_changed(self, _message=None) -> None:
        self.send(MessageName.LOCAL_SETTINGS_CHANGED)

    # -------- timers --------
    def tick(self) -> None:
        """Called from the main loop; fires the keepalive and notification timers."""
        if self.keepalive.expired():
            self.keepalive.cancel()
            log.info("No updates for %ss; finalizing current track", self.keepalive.window)
            self.scrobble_current()
            self.store.finalize()
        self.notifications.tick()
