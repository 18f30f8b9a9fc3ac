"""
Chat webhook backend (Slack-compatible incoming webhook).

- POSTs one JSON message per scrobbled song to the configured webhook URL.
- Two payload shapes: a rich attachment (default) or plain markdown text when
  slack_attachment is disabled.

Settings:
- slack_webhook (required), slack_username
- disable_slack, disable_slack_attachment
"""

from __future__ import annotations
import logging
import requests

from song import BackendError, Song

log = logging.getLogger("notifier")


def _compact(d: dict) -> dict:
    return {k: v for k, v in d.items() if v is not None}


class SlackNotifier:
    name = "slack"

    def __init__(self, webhook_url: str, username: str | None = None, attachment: bool = True, timeout: int = 5):
        self.webhook_url = webhook_url.strip()
        self.username = username
        self.attachment = attachment
        self.timeout = timeout

    def payload(self, song: Song) -> dict:
        if self.attachment:
            fallback = " - ".join(p for p in (song.title, song.artist, song.album) if p)
            return _compact({
                "username": self.username,
                "icon_url": song.image,
                "mrkdwn": True,
                "attachments": [_compact({
                    "fallback": fallback,
                    "title": song.title,
                    "text": song.byline,
                    "thumb_url": song.image,
                })],
            })
        return _compact({
            "username": self.username,
            "thumb_url": song.image,
            "mrkdwn": True,
            "text": f"*{song.title}*\n{song.byline}",
        })

    def send(self, song: Song) -> None:
        try:
            resp = requests.post(self.webhook_url, json=self.payload(song), timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise BackendError(f"slack webhook failed: {e}") from e
        log.debug("Posted %s — %s to webhook", song.artist, song.title)


def from_settings(settings) -> SlackNotifier | None:
    url = settings.get("slack_webhook")
    if not url:
        return None
    return SlackNotifier(
        webhook_url=url,
        username=settings.get("slack_username"),
        attachment=settings.enabled("slack_attachment"),
    )
