import pytest

from coordinator import BackgroundCoordinator
from dispatcher import NotificationDispatcher
from keepalive import Keepalive
from messages import Message, MessageName
from notification_center import DEFAULT_ICON, NotificationCenter
from settings import Settings
from state import TrackStateStore, TrackStatus


class RecordingBackend:
    def __init__(self):
        self.songs = []

    def send(self, song):
        self.songs.append(song)


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def make_coordinator(transport, clock, backend):
    def make(settings=None):
        settings = settings or Settings({})
        store = TrackStateStore(settings)
        dispatcher = NotificationDispatcher(settings, backends={"slack": lambda s: backend})
        notifications = NotificationCenter(settings, transport, clock=clock)
        return BackgroundCoordinator(store, dispatcher, transport, notifications,
                                     keepalive=Keepalive(15, clock=clock))
    return make


def now_playing(data):
    return {"name": "nowPlaying", "message": data}


def test_now_playing_sets_current_and_notifies(make_coordinator, transport, snapshot):
    coordinator = make_coordinator()
    coordinator.handle(now_playing(snapshot()))

    assert coordinator.store.current_track.id == "t1"
    assert transport.names == ["showNotification"]
    assert transport.sent[0].message == {"title": "Now Playing", "message": "A - T", "image": DEFAULT_ICON}


def test_missing_artist_requests_edit(make_coordinator, transport, snapshot):
    coordinator = make_coordinator()
    coordinator.handle(now_playing(snapshot(artist=None)))
    assert transport.names == ["trackEditRequired"]


def test_track_edited_resolves_and_saves(make_coordinator, transport, snapshot):
    coordinator = make_coordinator()
    coordinator.handle(now_playing(snapshot(artist=None)))
    coordinator.handle({"name": "trackEdited", "message": {"id": "t1", "artist": "Fixed"}})

    track = coordinator.store.current_track
    assert track.artist == "Fixed"
    assert track.editrequired is False
    assert track.noscrobble is False
    assert transport.names == ["trackEditRequired", "showNotification", "trackEditSaved"]


def test_scrobbles_once_when_threshold_crossed(make_coordinator, backend, snapshot):
    coordinator = make_coordinator()
    coordinator.handle(now_playing(snapshot(elapsed=0)))
    assert backend.songs == []

    coordinator.handle({"name": "updateCurrentTrack", "message": {"id": "t1", "elapsed": 60000}})
    coordinator.handle({"name": "updateCurrentTrack", "message": {"id": "t1", "elapsed": 90000}})

    assert len(backend.songs) == 1
    assert coordinator.store.current_track.scrobbled is True


def test_patch_for_other_track_is_ignored(make_coordinator, backend, snapshot):
    coordinator = make_coordinator()
    coordinator.handle(now_playing(snapshot(elapsed=0)))
    coordinator.handle({"name": "updateCurrentTrack", "message": {"id": "other", "elapsed": 240000}})
    assert coordinator.store.current_track.elapsed == 0
    assert backend.songs == []


def test_do_not_scrobble_button(make_coordinator, transport, backend, snapshot):
    coordinator = make_coordinator()
    coordinator.handle(now_playing(snapshot(elapsed=0)))
    coordinator.handle({"name": "doNotScrobbleButtonClicked"})

    assert coordinator.store.current_track.noscrobble is True
    assert transport.names[-1] == "trackNoScrobbleSet"

    coordinator.handle({"name": "updateCurrentTrack", "message": {"id": "t1", "elapsed": 240000}})
    assert backend.songs == []


def test_popup_settings_changed_is_echoed(make_coordinator, transport):
    make_coordinator().handle({"name": "popupSettingsChanged"})
    assert transport.names == ["localSettingsChanged"]


def test_unknown_and_outbound_names_are_ignored(make_coordinator, transport):
    coordinator = make_coordinator()
    coordinator.handle({"name": "somethingElse", "message": 1})
    coordinator.handle({"name": "trackEditSaved"})
    assert transport.sent == []


def test_failing_handler_does_not_stop_later_messages(make_coordinator, snapshot):
    coordinator = make_coordinator()
    coordinator.handle(now_playing({"artist": "no id"}))
    coordinator.handle(now_playing(snapshot()))
    assert coordinator.store.current_track.id == "t1"


def test_messages_arrive_through_transport(make_coordinator, transport, snapshot):
    coordinator = make_coordinator()
    transport.receive(now_playing(snapshot(id="a")))
    transport.receive(now_playing(snapshot(id="b")))
    assert transport.pump() == 2
    assert coordinator.store.current_track.id == "b"
    assert [t.id for t in coordinator.store.history] == ["a", "b"]


def test_new_track_gives_outgoing_track_a_last_pass(make_coordinator, backend, snapshot):
    coordinator = make_coordinator(Settings({"disable_scrobbling": "true"}))
    coordinator.handle(now_playing(snapshot(id="a", elapsed=0)))
    coordinator.handle({"name": "updateCurrentTrack", "message": {"id": "a", "elapsed": 241000}})
    assert backend.songs == []

    coordinator.dispatcher.settings.update(disable_scrobbling=None)
    first = coordinator.store.current_track
    coordinator.handle(now_playing(snapshot(id="b", elapsed=0)))
    assert [s.title for s in backend.songs] == ["T"]
    assert first.status is TrackStatus.SCROBBLED


def test_keepalive_finalizes_idle_track(make_coordinator, clock, backend, snapshot):
    coordinator = make_coordinator()
    coordinator.handle(now_playing(snapshot(elapsed=0)))
    track = coordinator.store.current_track

    clock.advance(10)
    coordinator.handle({"name": "updateCurrentTrack", "message": {"id": "t1", "elapsed": 20000}})
    clock.advance(10)
    coordinator.tick()
    assert coordinator.store.current_track is track

    clock.advance(6)
    coordinator.tick()
    assert coordinator.store.current_track is None
    assert track.status is TrackStatus.SUPERSEDED
    assert backend.songs == []


def test_keepalive_scrobbles_eligible_track_before_clearing(make_coordinator, clock, backend, snapshot):
    coordinator = make_coordinator(Settings({"disable_scrobbling": "1"}))
    coordinator.handle(now_playing(snapshot(elapsed=241000)))
    coordinator.dispatcher.settings.update(disable_scrobbling=None)

    clock.advance(15)
    coordinator.tick()
    assert len(backend.songs) == 1
    assert coordinator.store.current_track is None


def test_notifications_autodismiss(make_coordinator, clock, snapshot):
    coordinator = make_coordinator()
    coordinator.handle(now_playing(snapshot()))
    assert coordinator.notifications.visible is not None

    clock.advance(5)
    coordinator.tick()
    assert coordinator.notifications.visible is None


def test_notifications_can_be_disabled(transport, clock):
    center = NotificationCenter(Settings({"disable_notifications": "true"}), transport, clock=clock)
    assert center.notify("Now Playing", "A - T") is None
    assert transport.sent == []


def test_notification_without_autodismiss_stays(transport, clock):
    center = NotificationCenter(Settings({"disable_autodismiss": "true"}), transport, clock=clock)
    note = center.notify("Now Playing", "A - T", image="http://img")
    clock.advance(60)
    center.tick()
    assert center.visible is note
    assert transport.sent[0].message["image"] == "http://img"


def test_replicated_state_reaches_ui_before_each_message(clock, snapshot):
    from transport import ReplicaView, ReplicatingTransport

    settings = Settings({})
    store = TrackStateStore(settings)
    view = ReplicaView()
    transport = ReplicatingTransport(view.deliver, store.state)
    coordinator = BackgroundCoordinator(
        store, NotificationDispatcher(settings, backends={}), transport,
        NotificationCenter(settings, transport, clock=clock), keepalive=Keepalive(15, clock=clock),
    )
    coordinator.handle(Message(MessageName.NOW_PLAYING, snapshot(id="x")))
    assert view.current_track["id"] == "x"
    assert [t["id"] for t in view.history] == ["x"]


def test_track_edit_keeps_track_alive(make_coordinator, clock, snapshot):
    coordinator = make_coordinator()
    coordinator.handle(now_playing(snapshot(artist=None)))

    clock.advance(14)
    coordinator.handle({"name": "trackEdited", "message": {"id": "t1", "artist": "Fixed"}})
    clock.advance(2)
    coordinator.tick()
    assert coordinator.store.current_track is not None
    assert coordinator.store.current_track.artist == "Fixed"

    clock.advance(14)
    coordinator.tick()
    assert coordinator.store.current_track is None


def test_edit_for_other_track_does_not_extend_keepalive(make_coordinator, clock, snapshot):
    coordinator = make_coordinator()
    coordinator.handle(now_playing(snapshot(artist=None)))

    clock.advance(14)
    coordinator.handle({"name": "trackEdited", "message": {"id": "other", "artist": "Fixed"}})
    clock.advance(2)
    coordinator.tick()
    assert coordinator.store.current_track is None


def test_repeated_now_playing_for_current_track_keeps_progress(make_coordinator, clock, backend, snapshot):
    coordinator = make_coordinator()
    coordinator.handle(now_playing(snapshot(elapsed=10000)))

    clock.advance(10)
    coordinator.handle(now_playing(snapshot(elapsed=60000, title="Ignored")))
    track = coordinator.store.current_track
    assert track.elapsed == 60000
    assert track.title == "T"
    assert len(coordinator.store.history) == 1
    assert len(backend.songs) == 1

    clock.advance(10)
    coordinator.tick()
    assert coordinator.store.current_track is track


def test_autodismiss_does_not_message_the_host(make_coordinator, transport, clock, snapshot):
    coordinator = make_coordinator()
    coordinator.handle(now_playing(snapshot()))
    sent = list(transport.names)

    clock.advance(5)
    coordinator.tick()
    assert coordinator.notifications.visible is None
    assert transport.names == sent
