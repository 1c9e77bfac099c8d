"""Reel reference data endpoints."""
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from reelvote.api.deps import get_db, global_cache
from reelvote.core.cache import get_or_fetch
from reelvote.core.constants import ACTIVE_REELS_CACHE_KEY
from reelvote.core.rate_limit import RATE_LIMITS, limiter
from reelvote.schemas import Reel
from reelvote.services import get_active_reels

router = APIRouter()

# Reels change only through admin writes, which invalidate the entry
REELS_CACHE_TTL = 30.0


@router.get("", response_model=List[Reel])
@limiter.limit(RATE_LIMITS["stats"])
async def list_reels(request: Request, db: Session = Depends(get_db)):
    """Active reels ordered by category, then reel number."""
    return get_or_fetch(
        global_cache,
        ACTIVE_REELS_CACHE_KEY,
        lambda: get_active_reels(db),
        ttl_seconds=REELS_CACHE_TTL,
    )
