"""Vote business logic."""
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reelvote.core.errors import NotRegistered, WriteConflict
from reelvote.core.utils import utcnow
from reelvote.db.models import Reel, Vote, VoteAggregate, Voter
from reelvote.schemas import VoteUpsert
from reelvote.services.aggregates import refresh_aggregate
from reelvote.services.utils import dialect_insert


def upsert_vote(db: Session, vote: VoteUpsert, scoring_policy: str) -> Vote:
    """
    Record a voter's score for a reel.

    (reel_id, voter_id) is the conflict key: a repeat vote overwrites the
    score and ``updated_at`` of the existing row (last write wins). The reel's
    aggregate is refreshed in the same transaction.
    """
    reel = db.query(Reel).filter(Reel.id == vote.reel_id).first()
    if not reel:
        raise ValueError("Reel not found")

    voter = db.query(Voter).filter(Voter.id == vote.voter_id).first()
    if not voter:
        raise NotRegistered()

    values = {
        "reel_id": vote.reel_id,
        "voter_id": vote.voter_id,
        "score": vote.score,
        "voter_type": vote.voter_type,
        "updated_at": utcnow(),
    }
    if vote.voter_name:
        values["voter_name"] = vote.voter_name
    if vote.category:
        values["category"] = vote.category

    stmt = dialect_insert(db, Vote).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["reel_id", "voter_id"],
        set_={key: value for key, value in values.items() if key not in ("reel_id", "voter_id")},
    )

    try:
        db.execute(stmt)
        refresh_aggregate(db, vote.reel_id, scoring_policy)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if "uq_vote_reel_voter" in str(e) or "unique constraint" in str(e).lower():
            raise WriteConflict()
        raise

    return get_vote(db, vote.reel_id, vote.voter_id)


def get_vote(db: Session, reel_id: str, voter_id: str) -> Optional[Vote]:
    return db.query(Vote).filter(
        Vote.reel_id == reel_id,
        Vote.voter_id == voter_id
    ).first()


def clear_all_votes(db: Session) -> int:
    """Delete every vote and aggregate. Irreversible; meant for pre-event resets."""
    deleted = db.query(Vote).delete(synchronize_session=False)
    db.query(VoteAggregate).delete(synchronize_session=False)
    db.commit()
    return deleted
