import os
import sys

import pytest

# Modules live flat under app/, as when running `python app/main.py`
_APP_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, "app"))
if _APP_DIR not in sys.path:
    sys.path.insert(0, _APP_DIR)

from messages import Message  # noqa: E402
from settings import Settings  # noqa: E402
from transport import TransportAdapter  # noqa: E402


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingTransport(TransportAdapter):
    def __init__(self):
        super().__init__()
        self.sent: list[Message] = []

    def send(self, message):
        self.sent.append(message)

    @property
    def names(self):
        return [m.name.value for m in self.sent]


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        import requests
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.fixture
def settings():
    return Settings({})


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def snapshot():
    def make(id="t1", **fields):
        data = {"id": id, "artist": "A", "title": "T", "album": "Al", "host": "spotify",
                "duration": 200000, "elapsed": 0, "dateTime": 1700000000000}
        data.update(fields)
        return data
    return make
