"""Vote write and point-lookup endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from reelvote.api.deps import get_db, get_scoring_policy, global_cache
from reelvote.core.constants import RESULTS_CACHE_KEY
from reelvote.core.errors import NotRegistered, WriteConflict
from reelvote.core.logging_config import get_logger
from reelvote.core.rate_limit import RATE_LIMITS, limiter
from reelvote.schemas import VoteRead, VoteUpsert
from reelvote.services import get_vote, upsert_vote

logger = get_logger(__name__)
router = APIRouter()


@router.put("", response_model=VoteRead)
@limiter.limit(RATE_LIMITS["vote"])
async def cast_vote(
    request: Request,
    vote: VoteUpsert,
    db: Session = Depends(get_db),
    scoring_policy: str = Depends(get_scoring_policy)
):
    """
    Record or overwrite a voter's score for a reel.

    Keyed on (reel_id, voter_id): a repeat vote replaces the earlier score.
    The reel's aggregate is refreshed before the response is sent.

    Example:
        Request:
            PUT /api/v1/votes
            {"reel_id": "reel-1", "voter_id": "9b1d...", "score": 8, "voter_type": "audience"}

        Response (200):
            {"reel_id": "reel-1", "voter_id": "9b1d...", "score": 8, ...}

    Raises:
        HTTPException: 404 if the reel or voter does not exist
        HTTPException: 422 if the score is outside 1..10
    """
    try:
        row = upsert_vote(db, vote, scoring_policy)
    except NotRegistered as e:
        raise HTTPException(status_code=404, detail=str(e))
    except WriteConflict:
        # Lost a same-key insert race; the other write stands
        logger.info("vote_write_conflict", reel_id=vote.reel_id, voter_id=vote.voter_id)
        row = get_vote(db, vote.reel_id, vote.voter_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    global_cache.invalidate_prefix(RESULTS_CACHE_KEY)
    logger.info("vote_recorded", reel_id=vote.reel_id, voter_id=vote.voter_id, voter_type=vote.voter_type)
    return row


@router.get("/{reel_id}/{voter_id}", response_model=VoteRead)
async def read_vote(reel_id: str, voter_id: str, db: Session = Depends(get_db)):
    """404 means the voter has not voted on this reel."""
    row = get_vote(db, reel_id, voter_id)
    if not row:
        raise HTTPException(status_code=404, detail="Vote not found")
    return row
