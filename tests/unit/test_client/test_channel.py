"""Unit tests for the realtime channel over the in-process hub."""
import asyncio

import pytest

from reelvote.client import LocalTransport, RealtimeChannel
from reelvote.schemas import ConnectionStatus, EventType, PageRole, VoteEvent


async def settle(seconds=0.02):
    await asyncio.sleep(seconds)


def vote(reel_id, score):
    return VoteEvent(reel_id=reel_id, score=score, voter_type="audience", voter_id="voter-1")


async def joined(hub, device_id, role=PageRole.AUDIENCE):
    channel = RealtimeChannel(LocalTransport(hub), device_id, role)
    await channel.connect()
    return channel


@pytest.mark.unit
class TestRealtimeChannel:

    @pytest.mark.asyncio
    async def test_broadcast_reaches_every_member_including_sender(self, hub):
        sender = await joined(hub, "device-a")
        listener = await joined(hub, "device-b")
        seen = {"a": [], "b": []}
        sender.on(EventType.VOTE, lambda event: seen["a"].append(event.score))
        listener.on(EventType.VOTE, lambda event: seen["b"].append(event.score))

        sender.broadcast(EventType.VOTE, vote("doc-1", 8))
        await settle()

        assert seen == {"a": [8], "b": [8]}

    @pytest.mark.asyncio
    async def test_dict_payloads_are_validated(self, hub):
        channel = await joined(hub, "device-a")
        received = []
        channel.on(EventType.REEL_CHANGE, received.append)

        channel.broadcast(EventType.REEL_CHANGE, {"reelId": "doc-2", "status": "live"})
        await settle()

        assert received[0].reel_id == "doc-2"
        assert received[0].to_wire() == {"reelId": "doc-2", "status": "live"}

    @pytest.mark.asyncio
    async def test_queue_flushes_in_order_exactly_once(self, hub):
        sender = await joined(hub, "device-a")
        listener = await joined(hub, "device-b")
        scores = []
        listener.on(EventType.VOTE, lambda event: scores.append(event.score))

        await sender.transport.drop()
        assert not sender.is_connected
        for score in (3, 5, 7):
            sender.broadcast(EventType.VOTE, vote("doc-1", score))
        assert sender.pending_count == 3
        await settle()
        assert scores == []

        await sender.connect()
        await settle()

        assert sender.pending_count == 0
        assert scores == [3, 5, 7]

        await sender.transport.drop()
        await sender.connect()
        await settle()
        assert scores == [3, 5, 7]

    @pytest.mark.asyncio
    async def test_presence_counts_devices_but_not_control(self, hub):
        control = await joined(hub, "device-control", PageRole.CONTROL)
        audience = await joined(hub, "device-a")
        judge = await joined(hub, "device-j", PageRole.JUDGE)
        counts = []
        control.on_presence(counts.append)
        await settle()

        assert control.connected_devices == 2
        assert audience.connected_devices == 2

        await judge.close()
        await settle()
        assert control.connected_devices == 1
        assert counts[-1] == 1

    @pytest.mark.asyncio
    async def test_status_listeners(self, hub):
        channel = RealtimeChannel(LocalTransport(hub), "device-a")
        statuses = []
        channel.on_status(statuses.append)

        await channel.connect()
        await channel.transport.drop()

        assert statuses == [
            ConnectionStatus.CONNECTING,
            ConnectionStatus.CONNECTED,
            ConnectionStatus.DISCONNECTED,
        ]

    @pytest.mark.asyncio
    async def test_coroutine_handlers(self, hub):
        channel = await joined(hub, "device-a")
        received = []

        async def handler(event):
            await asyncio.sleep(0)
            received.append(event.reel_id)

        channel.on(EventType.VOTE, handler)
        channel.broadcast(EventType.VOTE, vote("fic-1", 6))
        await settle()

        assert received == ["fic-1"]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_block_others(self, hub):
        channel = await joined(hub, "device-a")
        received = []

        def broken(event):
            raise RuntimeError("handler bug")

        channel.on(EventType.VOTE, broken)
        channel.on(EventType.VOTE, received.append)
        channel.broadcast(EventType.VOTE, vote("doc-1", 9))
        await settle()

        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_invalid_payload_is_dropped(self, hub):
        channel = await joined(hub, "device-a")
        received = []
        channel.on(EventType.VOTE, received.append)

        await hub.broadcast(EventType.VOTE, {"reelId": "doc-1"})
        await settle()

        assert received == []

    @pytest.mark.asyncio
    async def test_off_removes_handler(self, hub):
        channel = await joined(hub, "device-a")
        received = []
        channel.on(EventType.VOTE, received.append)
        channel.off(EventType.VOTE, received.append)

        channel.broadcast(EventType.VOTE, vote("doc-1", 2))
        await settle()

        assert received == []
