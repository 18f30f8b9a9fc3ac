import hashlib
import requests
import xml.etree.ElementTree as ET
from urllib.parse import urlparse


class BluOSSource:
    """
    Scrape source for a BluOS player: fetches and parses /Status (XML).
    Uses recursive lookup + tag fallbacks (name/title1, artist, album, secs, totlen, state).
    Produces snapshots in milliseconds, keyed by an id derived from the metadata.
    """

    id = "bluos"

    def __init__(self, host: str, port: int = 11000, timeout: int = 5):
        self.host = host
        self.port = port
        self.base = f"http://{host}:{port}"
        self.timeout = timeout

    def test(self, url: str) -> bool:
        parsed = urlparse(url)
        return parsed.hostname == self.host and (parsed.port or 80) == self.port

    def _findtext_any(self, root: ET.Element, *tags: str):
        for t in tags:
            el = root.find(f".//{t}")
            if el is not None and el.text:
                return el.text.strip()
        return None

    def _to_ms(self, s):
        if s is None: return None
        try:
            return int(float(s) * 1000)
        except ValueError:
            return None

    @staticmethod
    def track_id(artist, title, album) -> str:
        key = "\x1f".join(p or "" for p in (artist, title, album))
        return hashlib.sha1(key.encode("utf-8")).hexdigest()[:16]

    def parse(self, text: str) -> dict | None:
        try:
            root = ET.fromstring(text)
        except ET.ParseError:
            return None

        title  = self._findtext_any(root, "name", "title1", "title", "song")
        artist = self._findtext_any(root, "artist", "title2")
        album  = self._findtext_any(root, "album", "title3")
        if not title:
            return None

        state = self._findtext_any(root, "state", "status", "mode")
        state = state.lower() if state else None

        return {
            "id": self.track_id(artist, title, album),
            "host": self.id,
            "title": title,
            "artist": artist,
            "album": album,
            "elapsed": self._to_ms(self._findtext_any(root, "secs", "elapsed", "position", "time")),
            "duration": self._to_ms(self._findtext_any(root, "totlen", "duration", "total", "trackLength", "length")),
            # BluOS reports 'stream' for radio and 'play' for local/queue playback
            "stopped": state not in ("play", "stream"),
        }

    def scrape(self) -> dict | None:
        resp = requests.get(f"{self.base}/Status", timeout=self.timeout)
        resp.raise_for_status()
        return self.parse(resp.text)
