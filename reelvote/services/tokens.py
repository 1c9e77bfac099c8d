"""Redemption token lookup, claiming and issuance."""
from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reelvote.core.logging_config import get_logger
from reelvote.core.security import generate_token_code
from reelvote.core.utils import utcnow
from reelvote.db.models import Token
from reelvote.schemas import TokenIssue

logger = get_logger(__name__)


def get_token_by_code(db: Session, code: str) -> Optional[Token]:
    """Point lookup by normalized (upper-case) token string."""
    return db.query(Token).filter(Token.token == code).first()


def claim_token(db: Session, token_id: int, device_id: str) -> Optional[Token]:
    """
    Bind an unused token to ``device_id``.

    The bind is a single conditional UPDATE on ``is_used = false``, so when two
    devices race for the same token exactly one UPDATE matches a row. The
    token is returned either way; callers compare its ``device_id`` with their
    own to learn whether they won. Returns None if the token does not exist.
    """
    result = db.execute(
        update(Token)
        .where(Token.id == token_id, Token.is_used.is_(False))
        .values(is_used=True, device_id=device_id, used_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.commit()

    token = db.get(Token, token_id)
    if token is None:
        return None

    if result.rowcount == 1:
        logger.info("token_claimed", token_id=token_id, device_id=device_id)
    elif token.device_id != device_id:
        logger.info("token_claim_rejected", token_id=token_id, device_id=device_id)
    return token


def attach_voter(db: Session, token_id: int, voter_id: str) -> Optional[Token]:
    """Back-link the voter registered from this token."""
    token = db.get(Token, token_id)
    if token is None:
        return None
    token.voter_id = voter_id
    db.commit()
    db.refresh(token)
    return token


def issue_tokens(db: Session, requests: List[TokenIssue]) -> List[Token]:
    """Create one unused token per request with a fresh random code."""
    issued = []
    for request in requests:
        issued.append(_issue_token(db, request))
    logger.info("tokens_issued", count=len(issued))
    return issued


def _issue_token(db: Session, request: TokenIssue) -> Token:
    # Codes are short, so retry on the rare unique collision
    for _ in range(5):
        token = Token(
            token=generate_token_code(),
            token_type=request.token_type,
            person_name=request.person_name,
            category=request.category,
        )
        try:
            db.add(token)
            db.commit()
            db.refresh(token)
            return token
        except IntegrityError:
            db.rollback()
            continue

    raise ValueError("Failed to generate unique token code")
