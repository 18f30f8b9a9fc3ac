import time
from typing import Callable

KEEPALIVE_SECONDS = 15.0


class Keepalive:
    """Single inactivity deadline for the current track.

    Checked from the main loop via expired(); no timer threads.
    """

    def __init__(self, window: float = KEEPALIVE_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.window = window
        self.clock = clock
        self._deadline: float | None = None

    @property
    def armed(self) -> bool:
        return self._deadline is not None

    def reset(self) -> None:
        self._deadline = self.clock() + self.window

    def cancel(self) -> None:
        self._deadline = None

    def expired(self) -> bool:
        return self._deadline is not None and self.clock() >= self._deadline
