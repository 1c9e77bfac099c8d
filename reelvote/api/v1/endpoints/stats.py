"""Aggregate projection reads."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from reelvote.api.deps import get_db, global_cache
from reelvote.core.cache import get_or_fetch
from reelvote.core.constants import RESULTS_CACHE_KEY
from reelvote.core.rate_limit import RATE_LIMITS, limiter
from reelvote.schemas import AggregateRead
from reelvote.services import get_aggregate, list_aggregates

router = APIRouter()

# Vote writes invalidate the listing, so this only bounds staleness under load
RESULTS_CACHE_TTL = 3.0


def cached_aggregates(db: Session) -> List[AggregateRead]:
    """Aggregate listing, best final score first, shared through the global cache."""
    return get_or_fetch(
        global_cache,
        RESULTS_CACHE_KEY,
        lambda: [AggregateRead.model_validate(row) for row in list_aggregates(db)],
        ttl_seconds=RESULTS_CACHE_TTL,
    )


@router.get("", response_model=List[AggregateRead])
@limiter.limit(RATE_LIMITS["stats"])
async def list_stats(request: Request, db: Session = Depends(get_db)):
    """All aggregate rows ordered by final score descending."""
    return cached_aggregates(db)


@router.get("/{reel_id}", response_model=AggregateRead)
@limiter.limit(RATE_LIMITS["stats"])
async def read_stats(request: Request, reel_id: str, db: Session = Depends(get_db)):
    """
    Aggregate row for one reel.

    A reel nobody has voted on has no row and answers 404; clients read that
    as all-zero stats.
    """
    row = get_aggregate(db, reel_id)
    if not row:
        raise HTTPException(status_code=404, detail="No votes for this reel")
    return row
