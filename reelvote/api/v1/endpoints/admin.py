"""Admin endpoints: reference data, token issuance and resets."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from reelvote.api.deps import get_db, global_cache, verify_admin_token
from reelvote.core.constants import ACTIVE_REELS_CACHE_KEY, RESULTS_CACHE_KEY
from reelvote.core.logging_config import get_logger
from reelvote.core.rate_limit import RATE_LIMITS, limiter
from reelvote.schemas import Reel, ReelCreate, TokenIssueRequest, TokenRead
from reelvote.services import clear_all_votes, create_reel, issue_tokens

logger = get_logger(__name__)
router = APIRouter(dependencies=[Depends(verify_admin_token)])


@router.post("/reels", response_model=Reel)
@limiter.limit(RATE_LIMITS["admin_write"])
async def create_reel_endpoint(
    request: Request,
    reel: ReelCreate,
    db: Session = Depends(get_db)
):
    """
    Register a reel (admin only).

    Cache invalidation:
        - Drops the active reel list and the results listing so the next
          read and the next SSE frame include the new reel
    """
    try:
        created = create_reel(db, reel)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    global_cache.invalidate(ACTIVE_REELS_CACHE_KEY)
    global_cache.invalidate_prefix(RESULTS_CACHE_KEY)
    logger.info("reel_created", reel_id=created.id, category=created.category)
    return created


@router.post("/tokens", response_model=List[TokenRead])
@limiter.limit(RATE_LIMITS["admin_write"])
async def issue_tokens_endpoint(
    request: Request,
    body: TokenIssueRequest,
    db: Session = Depends(get_db)
):
    """Issue one unused redemption token per listed person (admin only)."""
    try:
        return issue_tokens(db, body.tokens)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/votes")
@limiter.limit(RATE_LIMITS["admin_write"])
async def clear_votes_endpoint(request: Request, db: Session = Depends(get_db)):
    """Delete every vote and aggregate (admin only). Cannot be undone."""
    deleted = clear_all_votes(db)
    global_cache.invalidate_prefix(RESULTS_CACHE_KEY)
    logger.warning("votes_cleared", deleted=deleted)
    return {"success": True, "deleted": deleted}


@router.get("/cache/stats")
@limiter.limit(RATE_LIMITS["admin_read"])
async def get_cache_stats(request: Request):
    """Cache size, hit/miss counters and per-entry ages (admin only)."""
    return global_cache.get_stats()
