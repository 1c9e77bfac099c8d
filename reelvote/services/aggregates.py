"""Per-reel vote aggregates.

The aggregate table is a projection of the votes table. It is refreshed in the
same transaction as every vote write, so readers only ever query it and never
scan raw votes.
"""
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from reelvote.core.scoring import compute_final_score
from reelvote.core.utils import utcnow
from reelvote.db.models import Vote, VoteAggregate
from reelvote.services.utils import dialect_insert


def refresh_aggregate(db: Session, reel_id: str, policy: str) -> None:
    """Recompute counts, averages and final score for one reel (no commit)."""
    rows = (
        db.query(Vote.voter_type, func.count(Vote.id), func.avg(Vote.score))
        .filter(Vote.reel_id == reel_id)
        .group_by(Vote.voter_type)
        .all()
    )
    cohorts = {voter_type: (count, float(avg or 0.0)) for voter_type, count, avg in rows}
    audience_count, audience_avg = cohorts.get("audience", (0, 0.0))
    judge_count, judge_avg = cohorts.get("judge", (0, 0.0))

    values = {
        "audience_count": audience_count,
        "judge_count": judge_count,
        "audience_average": round(audience_avg, 2),
        "judge_average": round(judge_avg, 2),
        "final_score": compute_final_score(
            audience_avg, judge_avg, audience_count, judge_count, policy=policy
        ),
        "updated_at": utcnow(),
    }

    stmt = dialect_insert(db, VoteAggregate).values(reel_id=reel_id, **values)
    db.execute(stmt.on_conflict_do_update(index_elements=["reel_id"], set_=values))


def get_aggregate(db: Session, reel_id: str) -> Optional[VoteAggregate]:
    return db.query(VoteAggregate).filter(VoteAggregate.reel_id == reel_id).first()


def list_aggregates(db: Session) -> List[VoteAggregate]:
    """All aggregates, best final score first."""
    return db.query(VoteAggregate).order_by(VoteAggregate.final_score.desc()).all()
