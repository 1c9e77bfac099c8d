"""Voter registration endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from reelvote.api.deps import get_db
from reelvote.core.errors import LinkConflict
from reelvote.core.logging_config import get_logger
from reelvote.core.rate_limit import RATE_LIMITS, limiter
from reelvote.schemas import VoterIdentityUpdate, VoterRead, VoterUpsert
from reelvote.services import find_voter_by_email, get_voter, link_identity, upsert_voter

logger = get_logger(__name__)
router = APIRouter()


@router.post("", response_model=VoterRead)
@limiter.limit(RATE_LIMITS["register"])
async def register_voter(
    request: Request,
    payload: VoterUpsert,
    db: Session = Depends(get_db)
):
    """
    Create or refresh the voter for a device.

    ``device_id`` is the conflict key, so re-registering a device returns the
    same voter id. ``name`` and ``token_id`` are kept unless supplied.

    Example:
        Request:
            POST /api/v1/voters
            {"device_id": "device-3f0c...", "device_type": "mobile"}

        Response (200):
            {"id": "9b1d...", "device_id": "device-3f0c...", "is_judge": false, ...}
    """
    voter = upsert_voter(db, payload)
    logger.info("voter_registered", voter_id=voter.id, device_id=voter.device_id, is_judge=voter.is_judge)
    return voter


@router.get("", response_model=VoterRead)
@limiter.limit(RATE_LIMITS["register"])
async def find_voter(
    request: Request,
    email: str = Query(..., min_length=3, max_length=254),
    db: Session = Depends(get_db)
):
    """Look up the voter linked to an email (account recovery)."""
    voter = find_voter_by_email(db, email)
    if not voter:
        raise HTTPException(status_code=404, detail="Voter not found")
    return voter


@router.get("/{voter_id}", response_model=VoterRead)
async def read_voter(voter_id: str, db: Session = Depends(get_db)):
    voter = get_voter(db, voter_id)
    if not voter:
        raise HTTPException(status_code=404, detail="Voter not found")
    return voter


@router.patch("/{voter_id}/identity", response_model=VoterRead)
@limiter.limit(RATE_LIMITS["register"])
async def update_voter_identity(
    request: Request,
    voter_id: str,
    identity: VoterIdentityUpdate,
    db: Session = Depends(get_db)
):
    """
    Link a verified email / external identity onto a voter.

    Raises:
        HTTPException: 404 if the voter does not exist
        HTTPException: 409 if the email belongs to another voter
    """
    try:
        voter = link_identity(db, voter_id, identity)
    except LinkConflict as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not voter:
        raise HTTPException(status_code=404, detail="Voter not found")
    return voter
