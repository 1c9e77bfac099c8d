"""Integration tests for the results SSE stream."""
from contextlib import contextmanager
from unittest.mock import patch

import pytest

from reelvote.api.deps import global_cache
from reelvote.api.v1.endpoints import sse


@pytest.mark.integration
class TestResultsStream:

    @patch("reelvote.api.v1.endpoints.sse.event_generator")
    def test_stream_headers(self, mock_event_generator, client):
        async def mock_generator():
            yield 'data: []\n\n'

        mock_event_generator.return_value = mock_generator()

        response = client.get("/api/v1/sse/results")

        assert response.status_code == 200
        assert response.headers["content-type"] == "text/event-stream; charset=utf-8"
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["x-accel-buffering"] == "no"
        assert response.text == "data: []\n\n"

    def test_snapshot_ranks_reels_with_zero_defaults(self, client, db_session, reels):
        voter_id = client.post("/api/v1/voters", json={"device_id": "device-a"}).json()["id"]
        client.put("/api/v1/votes", json={"reel_id": "fic-2", "voter_id": voter_id, "score": 9})

        @contextmanager
        def test_db_context():
            yield db_session

        with patch.object(sse, "get_db_context", test_db_context):
            everything = sse.results_snapshot()
            fiction = sse.results_snapshot("Fiction")

        assert everything[0]["id"] == "fic-2"
        assert everything[0]["stats"]["final_score"] == 9.0
        assert everything[0]["stats"]["total_votes"] == 1
        assert len(everything) == 4
        assert everything[1]["stats"]["final_score"] == 0.0
        assert [item["id"] for item in fiction] == ["fic-2", "fic-1"]

    def test_snapshots_cached_per_category_until_next_vote(self, client, db_session, reels):
        voter_id = client.post("/api/v1/voters", json={"device_id": "device-b"}).json()["id"]

        @contextmanager
        def test_db_context():
            yield db_session

        with patch.object(sse, "get_db_context", test_db_context):
            before = sse.results_snapshot("Fiction")
            sse.results_snapshot("Documentary")
            assert global_cache.get("results:Fiction") == before
            assert global_cache.get("results:Documentary") is not None

            client.put("/api/v1/votes", json={"reel_id": "fic-1", "voter_id": voter_id, "score": 8})

            assert global_cache.get("results:Fiction") is None
            assert global_cache.get("results:Documentary") is None
            after = sse.results_snapshot("Fiction")

        assert before[0]["stats"]["total_votes"] == 0
        assert after[0]["id"] == "fic-1"
        assert after[0]["stats"]["final_score"] == 8.0
