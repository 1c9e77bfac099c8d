"""Redemption token endpoints used by the token sign-in flow."""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from reelvote.api.deps import get_db
from reelvote.core.errors import InvalidToken
from reelvote.core.rate_limit import RATE_LIMITS, limiter
from reelvote.core.sanitization import normalize_token
from reelvote.schemas import TokenClaimRequest, TokenRead, TokenVoterLink
from reelvote.services import attach_voter, claim_token, get_token_by_code

router = APIRouter()


@router.get("/{token}", response_model=TokenRead)
@limiter.limit(RATE_LIMITS["token_lookup"])
async def lookup_token(request: Request, token: str, db: Session = Depends(get_db)):
    """
    Point lookup by token string. Lookup is case-insensitive.

    Raises:
        HTTPException: 400 if the string is not a well-formed token
        HTTPException: 404 if no such token exists
    """
    try:
        code = normalize_token(token)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    row = get_token_by_code(db, code)
    if not row:
        raise HTTPException(status_code=404, detail=InvalidToken.message)
    return row


@router.post("/{token_id}/claim", response_model=TokenRead)
@limiter.limit(RATE_LIMITS["token_lookup"])
async def claim_token_endpoint(
    request: Request,
    token_id: int,
    claim: TokenClaimRequest,
    db: Session = Depends(get_db)
):
    """
    Bind an unused token to a device.

    Always answers with the token's current state. The caller won the claim
    (or already owned the token) when the returned ``device_id`` is its own.
    """
    token = claim_token(db, token_id, claim.device_id)
    if not token:
        raise HTTPException(status_code=404, detail=InvalidToken.message)
    return token


@router.put("/{token_id}/voter", response_model=TokenRead)
async def link_token_voter(
    token_id: int,
    link: TokenVoterLink,
    db: Session = Depends(get_db)
):
    token = attach_voter(db, token_id, link.voter_id)
    if not token:
        raise HTTPException(status_code=404, detail=InvalidToken.message)
    return token
