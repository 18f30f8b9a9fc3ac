import pylast
import logging

from song import BackendError, Song

log = logging.getLogger("lastfm")

# Error classes so callers can tell failures apart in logs
class LastFMAuthError(BackendError): ...
class LastFMRateLimitError(BackendError): ...
class LastFMNetworkError(BackendError): ...
class LastFMUnknownError(BackendError): ...


def _ws_code(e: pylast.WSError) -> int | None:
    try:
        return int(e.get_id())
    except (TypeError, ValueError):
        return None


class LastFMClient:
    """Thin wrapper over pylast that reports scrobbled songs to Last.fm."""

    name = "lastfm"

    def __init__(self, api_key: str, api_secret: str, session_key: str):
        self.network = pylast.LastFMNetwork(
            api_key=api_key,
            api_secret=api_secret,
            session_key=session_key,
        )

    def send(self, song: Song) -> None:
        """Submit a scrobble with the song's start timestamp (unix seconds)."""
        try:
            self.network.scrobble(
                artist=song.artist, title=song.title, album=song.album, timestamp=song.timestamp
            )
        except pylast.WSError as e:
            code = _ws_code(e)
            msg = str(e)
            # Map common Last.fm error codes
            if code in (9, 4, 14):  # 9=Invalid session, 4=Auth failed, 14=Token expired
                raise LastFMAuthError(msg) from e
            elif code in (29,):  # 29=Rate limit exceeded
                raise LastFMRateLimitError(msg) from e
            raise LastFMUnknownError(f"Last.fm API error {code}: {msg}") from e
        except (pylast.NetworkError, pylast.MalformedResponseError) as e:
            raise LastFMNetworkError(str(e)) from e


def from_settings(settings) -> LastFMClient | None:
    api_key = settings.get("lastfm_api_key")
    api_secret = settings.get("lastfm_api_secret")
    session_key = settings.get("lastfm_session_key")
    if not (api_key and api_secret and session_key):
        return None
    return LastFMClient(api_key, api_secret, session_key)
