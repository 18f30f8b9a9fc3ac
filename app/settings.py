"""
Settings view shared by the background context.

The settings collaborator owns the values (a flat string mapping, like the
options page writes them). The core only reads them, lazily, every time it
makes a decision, so a change is picked up on the next message.

Env (via from_env):
- SCROBLR_DISABLE_<OPTION>=1 turns an option off (scrobbling, notifications,
  autodismiss, slack_attachment, a host name or a backend name)
- SCROBLR_SLACK_WEBHOOK, SCROBLR_SLACK_USERNAME
- SCROBLR_ROOM_DOMAIN, SCROBLR_ROOM_ID, SCROBLR_ROOM_TOKEN
- SCROBLR_DISCOGS_TOKEN
- SCROBLR_LASTFM_API_KEY, SCROBLR_LASTFM_API_SECRET, SCROBLR_LASTFM_SESSION_KEY
- SCROBLR_SCROBBLE_FRACTION (0 < f <= 1; default 0.25)
"""

from __future__ import annotations
import os
import logging
from typing import Mapping, MutableMapping

from eligibility import RELATIVE_FRACTION

log = logging.getLogger("settings")

ENV_PREFIX = "SCROBLR_"
_TRUTHY = {"1", "true", "yes", "on"}


class Settings:
    def __init__(self, values: MutableMapping[str, str] | None = None):
        self._values: MutableMapping[str, str] = values if values is not None else {}

    def enabled(self, option: str | None) -> bool:
        if not option:
            return True
        flag = self._values.get(f"disable_{option}")
        return str(flag).strip().lower() not in _TRUTHY if flag is not None else True

    def get(self, key: str, default: str | None = None) -> str | None:
        value = self._values.get(key)
        if value is None:
            return default
        value = str(value).strip()
        return value or default

    @property
    def scrobble_fraction(self) -> float:
        raw = self.get("scrobble_fraction")
        if raw is None:
            return RELATIVE_FRACTION
        try:
            fraction = float(raw)
        except ValueError:
            log.warning("Ignoring scrobble_fraction=%r (not a number)", raw)
            return RELATIVE_FRACTION
        if not 0 < fraction <= 1:
            log.warning("Ignoring scrobble_fraction=%r (must be in (0, 1])", raw)
            return RELATIVE_FRACTION
        return fraction

    def update(self, **values: str | None) -> None:
        """Owned by the settings collaborator; None removes a key."""
        for key, value in values.items():
            if value is None:
                self._values.pop(key, None)
            else:
                self._values[key] = value

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)


def from_env(environ: Mapping[str, str] | None = None) -> Settings:
    environ = os.environ if environ is None else environ
    values = {
        key[len(ENV_PREFIX):].lower(): value
        for key, value in environ.items()
        if key.startswith(ENV_PREFIX)
    }
    return Settings(values)
