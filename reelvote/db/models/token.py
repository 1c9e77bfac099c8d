"""Redemption token model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Boolean, Column, Integer, String, DateTime

from reelvote.db.base import Base


class Token(Base):
    __tablename__ = "tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String(32), unique=True, nullable=False, index=True)  # normalized upper-case
    token_type = Column(String(16), nullable=False, default="audience")
    person_name = Column(String(120), nullable=False)
    category = Column(String(80), nullable=True)
    is_used = Column(Boolean, nullable=False, default=False)
    device_id = Column(String(64), nullable=True)
    # No FK: voters.token_id already points here, and clearing voters must not touch tokens
    voter_id = Column(String(36), nullable=True)
    used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
