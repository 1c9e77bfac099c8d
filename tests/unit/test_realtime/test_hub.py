"""Unit tests for the broadcast hub."""
import pytest

from reelvote.realtime.hub import BroadcastHub
from reelvote.schemas import EventType


class FakeSocket:
    def __init__(self, fail=False):
        self.frames = []
        self.fail = fail

    async def send_json(self, frame):
        if self.fail:
            raise RuntimeError("socket closed")
        self.frames.append(frame)

    def broadcasts(self):
        return [frame for frame in self.frames if frame["type"] == "broadcast"]

    def last_presence(self):
        return [frame for frame in self.frames if frame["type"] == "presence"][-1]["state"]


def _track(device_id, role="audience"):
    return {
        "type": "presence",
        "action": "track",
        "payload": {"device_id": device_id, "page_role": role, "joined_at": "2026-01-01T00:00:00+00:00"},
    }


@pytest.mark.unit
class TestBroadcastHub:

    @pytest.mark.asyncio
    async def test_connect_sends_presence_state(self):
        hub = BroadcastHub()
        socket = FakeSocket()

        await hub.connect(socket)

        assert socket.frames == [{"type": "presence", "event": "sync", "state": {}}]
        assert hub.connection_count == 1

    @pytest.mark.asyncio
    async def test_broadcast_reaches_sender_too(self):
        hub = BroadcastHub()
        sender, other = FakeSocket(), FakeSocket()
        conn = await hub.connect(sender)
        await hub.connect(other)

        await hub.handle(conn, {"type": "broadcast", "event": "reel-change", "payload": {"reelId": "doc-1"}})

        expected = {"type": "broadcast", "event": "reel-change", "payload": {"reelId": "doc-1"}}
        assert sender.broadcasts() == [expected]
        assert other.broadcasts() == [expected]

    @pytest.mark.asyncio
    async def test_presence_counts_exclude_control(self):
        hub = BroadcastHub()
        sockets = [FakeSocket() for _ in range(3)]
        conns = [await hub.connect(socket) for socket in sockets]

        await hub.handle(conns[0], _track("device-control", "control"))
        await hub.handle(conns[1], _track("device-a"))
        await hub.handle(conns[2], _track("device-b", "judge"))

        assert hub.connected_devices() == 2
        assert len(sockets[0].last_presence()) == 3

    @pytest.mark.asyncio
    async def test_disconnect_publishes_presence(self):
        hub = BroadcastHub()
        staying, leaving = FakeSocket(), FakeSocket()
        await hub.connect(staying)
        conn = await hub.connect(leaving)
        await hub.handle(conn, _track("device-a"))

        await hub.disconnect(conn)

        assert staying.last_presence() == {}
        assert hub.connected_devices() == 0

    @pytest.mark.asyncio
    async def test_untrack(self):
        hub = BroadcastHub()
        conn = await hub.connect(FakeSocket())
        await hub.handle(conn, _track("device-a"))

        await hub.handle(conn, {"type": "presence", "action": "untrack"})

        assert hub.presence_state() == {}

    @pytest.mark.asyncio
    async def test_dead_socket_is_dropped(self):
        hub = BroadcastHub()
        healthy = FakeSocket()
        await hub.connect(healthy)
        dead = FakeSocket()
        await hub.connect(dead)
        dead.fail = True

        await hub.broadcast(EventType.VOTE, {"reelId": "doc-1"})

        assert hub.connection_count == 1
        assert len(healthy.broadcasts()) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message,error", [
        ({"type": "broadcast", "event": "shout", "payload": {}}, "Unknown event"),
        ({"type": "broadcast", "event": "vote", "payload": "nope"}, "payload must be an object"),
        ({"type": "presence", "action": "track", "payload": {"page_role": "audience"}}, "Invalid presence payload"),
        ({"type": "presence", "action": "wave"}, "Unknown presence action"),
        ({"type": "subscribe"}, "Unknown frame type"),
    ])
    async def test_malformed_frames(self, message, error):
        hub = BroadcastHub()
        conn = await hub.connect(FakeSocket())

        with pytest.raises(ValueError, match=error):
            await hub.handle(conn, message)
