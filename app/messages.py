"""
Message envelope passed between the background context and UI contexts.

Wire form is a plain dict: {"name": <MessageName>, "message": <payload>}.
"""

from __future__ import annotations
import enum
import logging
from dataclasses import dataclass
from typing import Any

log = logging.getLogger("messages")


class MessageName(str, enum.Enum):
    # scrape -> background
    NOW_PLAYING = "nowPlaying"
    UPDATE_CURRENT_TRACK = "updateCurrentTrack"
    # UI -> background
    TRACK_EDITED = "trackEdited"
    DO_NOT_SCROBBLE_BUTTON_CLICKED = "doNotScrobbleButtonClicked"
    POPUP_SETTINGS_CHANGED = "popupSettingsChanged"
    # background -> UI / host
    TRACK_EDIT_REQUIRED = "trackEditRequired"
    TRACK_EDIT_SAVED = "trackEditSaved"
    TRACK_NO_SCROBBLE_SET = "trackNoScrobbleSet"
    LOCAL_SETTINGS_CHANGED = "localSettingsChanged"
    OPEN_TAB = "openTab"
    SHOW_NOTIFICATION = "showNotification"
    STATE = "state"


@dataclass(frozen=True)
class Message:
    name: MessageName
    message: Any = None

    def to_dict(self) -> dict:
        return {"name": self.name.value, "message": self.message}

    @classmethod
    def parse(cls, raw: Any) -> Message | None:
        """Build a Message from a wire envelope; None if it is not one we know."""
        if isinstance(raw, Message):
            return raw
        if not isinstance(raw, dict) or "name" not in raw:
            log.debug("Dropping malformed envelope: %r", raw)
            return None
        try:
            name = MessageName(raw["name"])
        except ValueError:
            log.debug("Dropping unknown message %r", raw["name"])
            return None
        return cls(name, raw.get("message"))
