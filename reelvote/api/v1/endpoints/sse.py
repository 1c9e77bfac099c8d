"""Server-Sent Events endpoints."""
import asyncio
import json
from typing import Callable, Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import DatabaseError, SQLAlchemyError

from reelvote.api.deps import get_db_context, global_cache
from reelvote.api.v1.endpoints.reels import REELS_CACHE_TTL
from reelvote.api.v1.endpoints.stats import RESULTS_CACHE_TTL, cached_aggregates
from reelvote.core.cache import get_or_fetch
from reelvote.core.config import settings
from reelvote.core.constants import ACTIVE_REELS_CACHE_KEY, RESULTS_CACHE_KEY
from reelvote.core.logging_config import get_logger
from reelvote.schemas import merge_reel_stats
from reelvote.services import get_active_reels

logger = get_logger(__name__)
router = APIRouter()

MAX_CONSECUTIVE_ERRORS = 3

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable buffering in nginx
}


async def event_generator(request: Request, data_func: Callable, interval: float = 3):
    """
    Poll ``data_func`` every ``interval`` seconds and yield SSE data frames.

    Database errors are retried; after ``MAX_CONSECUTIVE_ERRORS`` in a row an
    ``error`` event is sent and the stream ends. Any other exception ends the
    stream immediately.
    """
    consecutive_errors = 0

    try:
        while True:
            if await request.is_disconnected():
                break

            try:
                data = data_func()
                yield f"data: {json.dumps(data)}\n\n"
                consecutive_errors = 0
            except (SQLAlchemyError, DatabaseError) as e:
                consecutive_errors += 1
                logger.warning(
                    "sse_database_error",
                    attempt=consecutive_errors,
                    max_attempts=MAX_CONSECUTIVE_ERRORS,
                    error=str(e),
                )
                if consecutive_errors >= MAX_CONSECUTIVE_ERRORS:
                    yield f"event: error\ndata: {json.dumps({'error': 'Service temporarily unavailable'})}\n\n"
                    break
            except Exception:
                logger.exception("sse_unexpected_error")
                yield f"event: error\ndata: {json.dumps({'error': 'Internal error'})}\n\n"
                break

            await asyncio.sleep(interval)

    except asyncio.CancelledError:
        # Client went away mid-sleep
        pass


def results_snapshot(category: Optional[str] = None) -> list:
    """
    Reels with merged stats, best final score first.

    Every open results screen polls this, so each category's board is cached
    under ``results:<category>``; vote writes drop the whole ``results`` prefix.
    """
    def build() -> list:
        with get_db_context() as db:
            reels = get_or_fetch(global_cache, ACTIVE_REELS_CACHE_KEY, lambda: get_active_reels(db), ttl_seconds=REELS_CACHE_TTL)
            aggregates = cached_aggregates(db)
        return [item.model_dump(mode="json") for item in merge_reel_stats(reels, aggregates, category)]

    key = f"{RESULTS_CACHE_KEY}:{category or '*'}"
    return get_or_fetch(global_cache, key, build, ttl_seconds=RESULTS_CACHE_TTL)


@router.get("/sse/results")
async def sse_results(request: Request, category: Optional[str] = Query(None, max_length=80)):
    """
    Live results stream for the results screen.

    Each frame is the full ranked list; ``category`` narrows it to one
    category. The client should reconnect automatically if disconnected.
    """
    return StreamingResponse(
        event_generator(request, lambda: results_snapshot(category), interval=settings.SSE_RESULTS_INTERVAL),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
