import os
import time
import logging

from bluos import BluOSSource
from coordinator import BackgroundCoordinator
from discogs_client import from_settings as discogs_from_settings
from dispatcher import NotificationDispatcher
from keepalive import Keepalive
from notification_center import NotificationCenter
from settings import from_env as settings_from_env
from sources import ScrapePoller
from state import TrackStateStore
from transport import select_transport

# -------------------------
# Configuration via ENV VARS
# -------------------------
BLUOS_HOST = os.getenv("BLUOS_HOST", "127.0.0.1")
BLUOS_PORT = int(os.getenv("BLUOS_PORT", "11000"))
POLL_INTERVAL = max(1, int(os.getenv("POLL_INTERVAL", "3")))
KEEPALIVE_SECONDS = float(os.getenv("KEEPALIVE_SECONDS", "15"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# -------------------------
# Logging setup
# -------------------------
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    force=True,  # ensure our config is used even if libs pre-configure logging
)
log = logging.getLogger("scroblr")


class LogContext:
    """Stand-in UI context for headless runs: outbound messages go to the log."""

    def deliver(self, envelope: dict):
        log.debug("-> UI %s %r", envelope.get("name"), envelope.get("message"))


class HeadlessHost:
    def __init__(self):
        self.contexts = [LogContext()]


def main():
    settings = settings_from_env()
    store = TrackStateStore(settings)
    transport = select_transport(HeadlessHost(), store.state)

    dispatcher = NotificationDispatcher(settings, enrichment=discogs_from_settings(settings))
    notifications = NotificationCenter(settings, transport)
    coordinator = BackgroundCoordinator(
        store, dispatcher, transport, notifications, keepalive=Keepalive(KEEPALIVE_SECONDS)
    )

    source = BluOSSource(BLUOS_HOST, BLUOS_PORT)
    # The scrape side talks to the background the same way a UI does: by message
    poller = ScrapePoller(source, lambda message: transport.receive(message.to_dict()))

    log.info("Starting scroblr bridge. Poll interval: %ss, keepalive: %ss", POLL_INTERVAL, KEEPALIVE_SECONDS)
    log.info("BluOS device: %s:%s | backends enabled: %s", BLUOS_HOST, BLUOS_PORT,
             ", ".join(name for name in dispatcher.backends if settings.enabled(name)))

    while True:
        poller.poll()
        transport.pump()
        coordinator.tick()
        time.sleep(POLL_INTERVAL)


def run():
    try:
        main()
    except KeyboardInterrupt:
        log.info("Shutting down…")


if __name__ == "__main__":
    run()
