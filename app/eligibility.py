from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from settings import Settings
    from state import Track

# Tracks this short (ms) are never scrobbled unless their duration is unknown
MIN_DURATION_MS = 30000
# Listening this long (ms) always counts, whatever the duration
ABS_ELAPSED_MS = 240000
# Otherwise this share of the duration must have been listened to
RELATIVE_FRACTION = 0.25


def should_scrobble(track: Track, settings: Settings) -> bool:
    """Decide whether a track has been listened to long enough to report.

    Pure: the answer depends only on the track fields and the settings, never
    on the clock or the network.
    """
    if not settings.enabled(track.host):
        return False
    if track.noscrobble:
        return False
    if not (track.artist and track.title):
        return False

    duration = track.duration or 0
    elapsed = track.elapsed or 0

    if duration > MIN_DURATION_MS:
        fraction = settings.scrobble_fraction
        return elapsed >= ABS_ELAPSED_MS or elapsed >= duration * fraction
    if not duration:
        return elapsed > MIN_DURATION_MS
    return False
