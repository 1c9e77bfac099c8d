"""Unit tests for the SSE event generator."""
import json
from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.exc import DatabaseError, SQLAlchemyError

from reelvote.api.v1.endpoints.sse import MAX_CONSECUTIVE_ERRORS, event_generator


def _request(disconnected=False):
    request = Mock()
    request.is_disconnected = AsyncMock(return_value=disconnected)
    return request


@pytest.mark.unit
class TestEventGenerator:

    @pytest.mark.asyncio
    async def test_yields_data_frames(self):
        data_func = Mock(return_value=[{"id": "doc-1", "stats": {"final_score": 7.5}}])
        gen = event_generator(_request(), data_func, interval=0.01)

        event = await gen.__anext__()

        assert event == f"data: {json.dumps(data_func.return_value)}\n\n"
        await gen.aclose()

    @pytest.mark.asyncio
    async def test_multiple_frames(self):
        counter = {"n": 0}

        def data_func():
            counter["n"] += 1
            return {"iteration": counter["n"]}

        gen = event_generator(_request(), data_func, interval=0.01)
        events = [await gen.__anext__() for _ in range(3)]
        await gen.aclose()

        assert events == [
            'data: {"iteration": 1}\n\n',
            'data: {"iteration": 2}\n\n',
            'data: {"iteration": 3}\n\n',
        ]

    @pytest.mark.asyncio
    async def test_stops_on_disconnect(self):
        data_func = Mock(return_value={})
        events = [event async for event in event_generator(_request(disconnected=True), data_func, interval=0.01)]

        assert events == []
        data_func.assert_not_called()

    @pytest.mark.asyncio
    async def test_transient_database_error_recovers(self):
        data_func = Mock(side_effect=[SQLAlchemyError("blip"), {"ok": True}])
        gen = event_generator(_request(), data_func, interval=0.01)

        event = await gen.__anext__()

        assert event == 'data: {"ok": true}\n\n'
        assert data_func.call_count == 2
        await gen.aclose()

    @pytest.mark.asyncio
    async def test_repeated_database_errors_end_stream(self):
        data_func = Mock(side_effect=DatabaseError("stmt", {}, Exception("down")))
        events = [event async for event in event_generator(_request(), data_func, interval=0.01)]

        assert data_func.call_count == MAX_CONSECUTIVE_ERRORS
        assert events == [f"event: error\ndata: {json.dumps({'error': 'Service temporarily unavailable'})}\n\n"]

    @pytest.mark.asyncio
    async def test_unexpected_error_ends_stream(self):
        data_func = Mock(side_effect=KeyError("boom"))
        events = [event async for event in event_generator(_request(), data_func, interval=0.01)]

        assert events == [f"event: error\ndata: {json.dumps({'error': 'Internal error'})}\n\n"]
