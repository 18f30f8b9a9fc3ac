import logging
import requests

log = logging.getLogger("discogs")

DISCOGS_API = "https://api.discogs.com"


class DiscogsClient:
    """Cover-art lookup against the Discogs database search.

    Strictly best-effort: every failure resolves to "no image".
    """

    def __init__(self, token: str | None, base_url: str = DISCOGS_API, timeout: int = 5):
        self.token = token.strip() if token else None
        self.base = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def supported(self) -> bool:
        return bool(self.token)

    def lookup(self, artist: str, album: str | None = None, title: str | None = None) -> str | None:
        if not self.supported or not artist:
            return None

        params = {"artist": artist}
        if album:
            params["release_title"] = album
        elif title:
            params["track"] = title

        try:
            resp = requests.get(
                f"{self.base}/database/search",
                params=params,
                headers={"Authorization": f"Discogs token={self.token}"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            results = resp.json().get("results") or []
        except (requests.RequestException, ValueError, AttributeError) as e:
            log.debug("Discogs search failed for %s / %s: %s", artist, album or title, e)
            return None

        first = results[0] if isinstance(results, list) and results else None
        if not isinstance(first, dict):
            log.debug("Discogs search returned nothing for %s / %s", artist, album or title)
            return None
        return first.get("thumb") or None


def from_settings(settings) -> DiscogsClient:
    return DiscogsClient(settings.get("discogs_token"))
