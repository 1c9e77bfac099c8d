"""Per-reel vote aggregate (projection refreshed on every vote write)."""
from datetime import datetime, timezone as tz
from sqlalchemy import Column, Float, Integer, String, DateTime, ForeignKey, Index

from reelvote.db.base import Base


class VoteAggregate(Base):
    __tablename__ = "vote_aggregates"

    reel_id = Column(String(64), ForeignKey("reels.id", ondelete="CASCADE"), primary_key=True)
    audience_count = Column(Integer, nullable=False, default=0)
    judge_count = Column(Integer, nullable=False, default=0)
    audience_average = Column(Float, nullable=False, default=0.0)
    judge_average = Column(Float, nullable=False, default=0.0)
    final_score = Column(Float, nullable=False, default=0.0)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    __table_args__ = (Index("idx_vote_aggregates_final_score", "final_score"),)
