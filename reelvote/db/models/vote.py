"""Vote model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from reelvote.db.base import Base


class Vote(Base):
    __tablename__ = "votes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reel_id = Column(String(64), ForeignKey("reels.id", ondelete="CASCADE"), nullable=False)
    voter_id = Column(String(36), ForeignKey("voters.id", ondelete="CASCADE"), nullable=False)
    score = Column(Integer, nullable=False)
    voter_type = Column(String(16), nullable=False, default="audience")
    voter_name = Column(String(120), nullable=True)
    category = Column(String(80), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    voter = relationship("Voter", back_populates="votes")

    __table_args__ = (
        Index("idx_votes_reel", "reel_id"),
        UniqueConstraint("reel_id", "voter_id", name="uq_vote_reel_voter"),
    )
