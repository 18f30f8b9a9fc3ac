"""
Message transports between the background context and UI contexts.

One implementation is picked at startup by select_transport(), from what the
host environment can do:
- BroadcastTransport: host keeps a live list of open UI contexts; we push to each
- ChannelTransport: one UI at a time over a bidirectional Connection
- ReplicatingTransport: host can only post one way and UIs cannot query us, so
  every send is preceded by a "state" message with {currentTrack, history}

Inbound messages are queued and handed to handlers by pump(), one at a time
and in arrival order, on the caller's loop.
"""

from __future__ import annotations
import abc
import logging
from collections import deque
from typing import Any, Callable

from messages import Message, MessageName

log = logging.getLogger("transport")

Handler = Callable[[Message], None]
StateProvider = Callable[[], dict]


class TransportAdapter(abc.ABC):
    def __init__(self):
        self._handlers: list[Handler] = []
        self._inbox: deque[Any] = deque()
        self._pumping = False

    def on_receive(self, handler: Handler) -> None:
        self._handlers.append(handler)

    @abc.abstractmethod
    def send(self, message: Message) -> None:
        ...

    def receive(self, raw: Any) -> None:
        """Queue an inbound envelope; it is handled on the next pump()."""
        self._inbox.append(raw)

    def _collect(self) -> None:
        """Pull pending inbound messages from the underlying primitive."""

    def pump(self) -> int:
        # A handler that pumps again would re-enter; the outer pump drains the rest
        if self._pumping:
            return 0
        self._pumping = True
        handled = 0
        try:
            self._collect()
            while self._inbox:
                message = Message.parse(self._inbox.popleft())
                if message is None:
                    continue
                for handler in self._handlers:
                    handler(message)
                handled += 1
        finally:
            self._pumping = False
        return handled

    def open_tab(self, url: str) -> None:
        self.send(Message(MessageName.OPEN_TAB, url))

    def show_notification(self, title: str, message: str, image: str | None = None) -> None:
        self.send(Message(MessageName.SHOW_NOTIFICATION, {"title": title, "message": message, "image": image}))


class BroadcastTransport(TransportAdapter):
    def __init__(self, contexts: list):
        super().__init__()
        # Live list owned by the host: contexts come and go as popups open and close
        self.contexts = contexts

    def send(self, message: Message) -> None:
        envelope = message.to_dict()
        for context in list(self.contexts):
            try:
                context.deliver(envelope)
            except Exception as e:
                log.debug("Delivery of %s to %r failed: %s", message.name.value, context, e)


class ChannelTransport(TransportAdapter):
    def __init__(self, connection):
        super().__init__()
        self.connection = connection
        self.closed = False

    def send(self, message: Message) -> None:
        if self.closed:
            return
        try:
            self.connection.send(message.to_dict())
        except (OSError, EOFError) as e:
            log.info("UI channel closed (%s); dropping %s", e, message.name.value)
            self.closed = True

    def _collect(self) -> None:
        if self.closed:
            return
        try:
            while self.connection.poll():
                self._inbox.append(self.connection.recv())
        except (OSError, EOFError) as e:
            log.info("UI channel closed while reading: %s", e)
            self.closed = True


class ReplicatingTransport(TransportAdapter):
    def __init__(self, post: Callable[[dict], None], state_provider: StateProvider):
        super().__init__()
        self._post = post
        self._state_provider = state_provider

    def send(self, message: Message) -> None:
        try:
            # UIs cannot pull state from us, so push it ahead of every message
            self._post(Message(MessageName.STATE, self._state_provider()).to_dict())
            self._post(message.to_dict())
        except Exception as e:
            log.debug("Post of %s failed: %s", message.name.value, e)


class ReplicaView:
    """UI-side end of a ReplicatingTransport.

    Keeps the last replicated state read-only and forwards every other
    message to the UI handler. Changes go back to the background by message.
    """

    def __init__(self, handler: Handler | None = None):
        self.handler = handler
        self._state: dict = {"currentTrack": None, "history": []}

    @property
    def current_track(self) -> dict | None:
        track = self._state.get("currentTrack")
        return dict(track) if track else None

    @property
    def history(self) -> list[dict]:
        return [dict(t) for t in self._state.get("history") or []]

    def deliver(self, raw: Any) -> None:
        message = Message.parse(raw)
        if message is None:
            return
        if message.name is MessageName.STATE:
            self._state = message.message or {"currentTrack": None, "history": []}
            return
        if self.handler is not None:
            self.handler(message)


def select_transport(host, state_provider: StateProvider) -> TransportAdapter:
    """Probe the host's messaging capabilities once and pick a transport."""
    if hasattr(host, "contexts"):
        transport: TransportAdapter = BroadcastTransport(host.contexts)
    elif all(callable(getattr(host, attr, None)) for attr in ("send", "recv", "poll")):
        transport = ChannelTransport(host)
    elif callable(getattr(host, "post", None)):
        transport = ReplicatingTransport(host.post, state_provider)
    else:
        raise TypeError(f"No usable messaging primitive on {host!r}")

    # Hosts that push inbound messages to us register the transport as listener
    if callable(getattr(host, "on", None)):
        host.on(transport.receive)

    log.info("Using %s", type(transport).__name__)
    return transport
