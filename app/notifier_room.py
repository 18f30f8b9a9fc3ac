"""
Room-notification backend: POST <domain>/v2/room/<room>/notification with a card.

Settings:
- room_domain (e.g., https://chat.example.com)
- room_id
- room_token (Bearer token)
- disable_room
"""

from __future__ import annotations
import uuid
import logging
import requests

from song import BackendError, Song

log = logging.getLogger("notifier")


class RoomNotifier:
    name = "room"

    def __init__(self, domain: str, room: str, token: str, timeout: int = 5):
        self.url = f"{domain.rstrip('/')}/v2/room/{room}/notification"
        self.token = token.strip()
        self.timeout = timeout

    def body(self, song: Song) -> dict:
        card = {
            # a fresh id per call, so the API never folds two cards together
            "id": str(uuid.uuid4()),
            "style": "application",
            "format": "medium",
            "title": song.title,
            "description": song.byline,
        }
        if song.image:
            card["icon"] = {"url": song.image}
        return {"message": f"{song.title} - {song.byline}", "card": card}

    def send(self, song: Song) -> None:
        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            resp = requests.post(self.url, json=self.body(song), headers=headers, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise BackendError(f"room notification failed: {e}") from e
        log.debug("Posted %s — %s to room", song.artist, song.title)


def from_settings(settings) -> RoomNotifier | None:
    domain = settings.get("room_domain")
    room = settings.get("room_id")
    token = settings.get("room_token")
    if not (domain and room and token):
        return None
    return RoomNotifier(domain, room, token)
