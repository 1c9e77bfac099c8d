"""Voter model."""
import uuid
from datetime import datetime, timezone as tz
from sqlalchemy import Boolean, Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from reelvote.db.base import Base


class Voter(Base):
    __tablename__ = "voters"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    device_id = Column(String(64), unique=True, nullable=False, index=True)
    device_type = Column(String(16), nullable=False, default="desktop")
    email = Column(String(254), unique=True, nullable=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    auth_user_id = Column(String(128), nullable=True)
    is_judge = Column(Boolean, nullable=False, default=False)
    judge_name = Column(String(120), nullable=True)
    name = Column(String(120), nullable=True)
    token_id = Column(Integer, ForeignKey("tokens.id", ondelete="SET NULL"), nullable=True)
    last_seen_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    votes = relationship("Vote", back_populates="voter", cascade="all, delete-orphan")
