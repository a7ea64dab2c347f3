from unittest import mock

import pytest
from asgiref.sync import async_to_sync

from retainer.realtime import hub as hub_module
from retainer.realtime.hub import HubAlreadyInitialized
from retainer.realtime.hub import HubUninitialized
from retainer.realtime.hub import NotificationHub
from retainer.realtime.socketio import initialize
from retainer.realtime.tests.utils import deliveries
from retainer.realtime.updates import UPDATE_EVENT_NAME


def connect(hub, sid):
    async_to_sync(hub.on_connect)(sid, {})


def join(hub, sid, room):
    async_to_sync(hub.on_join_room)(sid, room)


def test_join_is_idempotent(hub):
    connect(hub, "sid-1")
    join(hub, "sid-1", "acme-co")
    join(hub, "sid-1", "acme-co")

    assert hub.members("acme-co") == {"sid-1"}
    assert hub.rooms_of("sid-1") == {"acme-co"}


def test_join_strips_room_id(hub):
    connect(hub, "sid-1")
    join(hub, "sid-1", "  acme-co ")
    assert hub.members("acme-co") == {"sid-1"}


@pytest.mark.parametrize("room", ["", "   ", None, 42])
def test_empty_join_is_a_noop(hub, room, caplog):
    connect(hub, "sid-1")
    join(hub, "sid-1", room)

    assert hub.rooms == {}
    assert hub.rooms_of("sid-1") == set()
    assert "without a room id" in caplog.text


def test_broadcast_to_empty_room_delivers_nothing(hub, fake_server):
    delivered = async_to_sync(hub.broadcast)("nobody-home", "REFILL", {"totalHours": 5})
    assert delivered == 0
    fake_server.emit.assert_not_awaited()


def test_broadcast_without_room_id_is_skipped(hub, fake_server):
    connect(hub, "sid-1")
    join(hub, "sid-1", "acme-co")
    assert async_to_sync(hub.broadcast)(None, "REFILL") == 0
    assert async_to_sync(hub.broadcast)("", "REFILL") == 0
    fake_server.emit.assert_not_awaited()


def test_disconnect_drops_connection_and_memberships(hub, fake_server):
    connect(hub, "sid-1")
    join(hub, "sid-1", "acme-co")
    join(hub, "sid-1", "beta-inc")

    async_to_sync(hub.on_disconnect)("sid-1", "client disconnect")

    assert "sid-1" not in hub.connections
    assert hub.rooms == {}
    assert async_to_sync(hub.broadcast)("acme-co", "REFILL", {}) == 0
    fake_server.emit.assert_not_awaited()


def test_disconnect_keeps_other_members(hub):
    for sid in ("sid-1", "sid-2"):
        connect(hub, sid)
        join(hub, sid, "acme-co")

    async_to_sync(hub.on_disconnect)("sid-1")

    assert hub.members("acme-co") == {"sid-2"}


def test_refill_reaches_every_member_and_only_that_room(hub, fake_server):
    for sid in ("sid-1", "sid-2"):
        connect(hub, sid)
        join(hub, sid, "acme-co")
    connect(hub, "sid-3")
    join(hub, "sid-3", "other-co")

    delivered = async_to_sync(hub.broadcast)("acme-co", "REFILL", {"totalHours": 50})

    assert delivered == 2
    expected = {"type": "REFILL", "data": {"totalHours": 50}}
    assert sorted(deliveries(fake_server)) == [
        ("sid-1", expected),
        ("sid-2", expected),
    ]
    for call in fake_server.emit.await_args_list:
        assert call.args[0] == UPDATE_EVENT_NAME


def test_rooms_are_isolated(hub, fake_server):
    connect(hub, "A")
    join(hub, "A", "acme-co")
    connect(hub, "B")
    join(hub, "B", "beta-inc")

    async_to_sync(hub.broadcast)("acme-co", "ADD_LOG", {"id": 1})
    async_to_sync(hub.broadcast)("beta-inc", "DELETE_LOG", "log-9")

    assert deliveries(fake_server) == [
        ("A", {"type": "ADD_LOG", "data": {"id": 1}}),
        ("B", {"type": "DELETE_LOG", "data": "log-9"}),
    ]


def test_failing_connection_does_not_block_the_room(hub, fake_server, caplog):
    for sid in ("sid-1", "sid-2", "sid-3"):
        connect(hub, sid)
        join(hub, sid, "acme-co")

    async def emit(event, message, to=None):
        if to == "sid-2":
            msg = "transport closed"
            raise ConnectionError(msg)

    fake_server.emit.side_effect = emit

    delivered = async_to_sync(hub.broadcast)("acme-co", "STATUS_UPDATE", {"status": "PAUSED"})

    assert delivered == 2
    assert fake_server.emit.await_count == 3
    assert "sid-2" in caplog.text


def test_unknown_event_type_is_rejected(hub):
    connect(hub, "sid-1")
    join(hub, "sid-1", "acme-co")
    with pytest.raises(ValueError, match="NOT_A_TYPE"):
        async_to_sync(hub.broadcast)("acme-co", "NOT_A_TYPE", {})


def test_other_events_are_logged_only(hub, caplog):
    caplog.set_level("INFO", logger="retainer.realtime.hub")
    connect(hub, "sid-1")
    async_to_sync(hub.on_other_event)("ping-me", "sid-1", {"x": 1})

    assert hub.rooms == {}
    assert "[ping-me]" in caplog.text


def test_broadcast_before_initialization_raises():
    with pytest.raises(HubUninitialized):
        async_to_sync(hub_module.broadcast)("acme-co", "REFILL", {"totalHours": 50})


def test_broadcast_after_initialization_succeeds(hub, fake_server):
    connect(hub, "sid-1")
    join(hub, "sid-1", "acme-co")

    delivered = async_to_sync(hub_module.broadcast)("acme-co", "REFILL", {"totalHours": 50})

    assert delivered == 1
    fake_server.emit.assert_awaited_once_with(
        UPDATE_EVENT_NAME,
        {"type": "REFILL", "data": {"totalHours": 50}},
        to="sid-1",
    )


def test_double_initialization_is_rejected(hub, fake_server):
    other = mock.MagicMock(name="OtherServer")
    with pytest.raises(HubAlreadyInitialized):
        initialize(other)
    assert hub_module.get_hub() is hub
    other.on.assert_not_called()


def test_install_rejects_second_hub(fake_server):
    first = hub_module.install(NotificationHub(fake_server))
    with pytest.raises(HubAlreadyInitialized):
        hub_module.install(NotificationHub(fake_server))
    assert hub_module.get_hub() is first


def test_shutdown_forgets_the_hub(hub):
    assert hub_module.is_initialized()
    hub_module.shutdown()
    assert not hub_module.is_initialized()
    with pytest.raises(HubUninitialized):
        hub_module.get_hub()
