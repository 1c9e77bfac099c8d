"""Reel model."""
from sqlalchemy import Boolean, Column, Integer, String, Index

from reelvote.db.base import Base


class Reel(Base):
    __tablename__ = "reels"

    id = Column(String(64), primary_key=True)
    reel_number = Column(Integer, nullable=False)
    contestant_name = Column(String(120), nullable=False)
    category = Column(String(80), nullable=False)
    duration_seconds = Column(Integer, nullable=False, default=0)
    thumbnail_icon = Column(String(200), nullable=True)
    video_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("idx_reels_active_order", "is_active", "category", "reel_number"),
    )
