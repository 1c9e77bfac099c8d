"""Voter registration and identity linking."""
import uuid
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reelvote.core.errors import LinkConflict
from reelvote.core.logging_config import get_logger
from reelvote.core.utils import utcnow
from reelvote.db.models import Voter
from reelvote.schemas import VoterIdentityUpdate, VoterUpsert
from reelvote.services.utils import dialect_insert

logger = get_logger(__name__)


def upsert_voter(db: Session, payload: VoterUpsert) -> Voter:
    """
    Create or refresh the voter bound to ``payload.device_id``.

    ``device_id`` is the conflict key, so a device always maps to exactly one
    voter row. ``name`` and ``token_id`` are only overwritten when supplied;
    role fields and ``last_seen_at`` are refreshed on every call.
    """
    values = {
        "device_id": payload.device_id,
        "device_type": payload.device_type,
        "is_judge": payload.is_judge,
        "judge_name": payload.judge_name,
        "last_seen_at": utcnow(),
    }
    if payload.name:
        values["name"] = payload.name
    if payload.token_id is not None:
        values["token_id"] = payload.token_id

    stmt = dialect_insert(db, Voter).values(id=str(uuid.uuid4()), **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["device_id"],
        set_={key: value for key, value in values.items() if key != "device_id"},
    )
    db.execute(stmt)
    db.commit()

    return db.query(Voter).filter(Voter.device_id == payload.device_id).one()


def get_voter(db: Session, voter_id: str) -> Optional[Voter]:
    return db.query(Voter).filter(Voter.id == voter_id).first()


def find_voter_by_email(db: Session, email: str) -> Optional[Voter]:
    return db.query(Voter).filter(Voter.email == email.strip().lower()).first()


def link_identity(db: Session, voter_id: str, identity: VoterIdentityUpdate) -> Optional[Voter]:
    """
    Attach a verified email / external identity to a voter.

    Returns None when the voter does not exist.

    Raises:
        LinkConflict: the email already belongs to a different voter
    """
    voter = get_voter(db, voter_id)
    if not voter:
        return None

    owner = db.query(Voter).filter(Voter.email == identity.email, Voter.id != voter_id).first()
    if owner:
        raise LinkConflict()

    voter.email = identity.email
    voter.email_verified = identity.email_verified
    voter.auth_user_id = identity.auth_user_id
    voter.last_seen_at = utcnow()

    try:
        db.commit()
    except IntegrityError:
        # Another request linked the same email between our check and commit
        db.rollback()
        raise LinkConflict()

    db.refresh(voter)
    logger.info("voter_identity_linked", voter_id=voter_id, email_verified=identity.email_verified)
    return voter
