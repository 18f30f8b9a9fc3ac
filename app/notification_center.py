import logging
import time
from dataclasses import dataclass
from typing import Callable

log = logging.getLogger("notifications")

DEFAULT_ICON = "img/scroblr64.png"
AUTODISMISS_SECONDS = 5.0


@dataclass
class Notification:
    title: str
    message: str
    image: str
    dismiss_at: float | None = None


class NotificationCenter:
    """Local desktop notifications, fire and forget.

    At most one notification is visible; a new one replaces it. Rendering and
    dismissal are the host's job: we send showNotification through the
    transport, and `visible` only records what we consider shown. There is no
    dismiss message, so tick() clears that record without telling the host.
    """

    def __init__(self, settings, transport, clock: Callable[[], float] = time.monotonic,
                 dismiss_after: float = AUTODISMISS_SECONDS):
        self.settings = settings
        self.transport = transport
        self.clock = clock
        self.dismiss_after = dismiss_after
        self.visible: Notification | None = None

    def notify(self, title: str, message: str, image: str | None = None) -> Notification | None:
        if not self.settings.enabled("notifications"):
            return None

        note = Notification(title=title, message=message, image=image or DEFAULT_ICON)
        if self.settings.enabled("autodismiss"):
            note.dismiss_at = self.clock() + self.dismiss_after
        self.visible = note
        self.transport.show_notification(note.title, note.message, note.image)
        return note

    def tick(self) -> None:
        note = self.visible
        if note is not None and note.dismiss_at is not None and self.clock() >= note.dismiss_at:
            log.debug("Dismissing notification %r", note.title)
            self.visible = None
