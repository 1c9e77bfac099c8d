"""Reel reference data."""
from typing import List, Optional
from sqlalchemy.orm import Session

from reelvote.db.models import Reel as ReelRow
from reelvote.schemas import Reel, ReelCreate


def get_active_reels(db: Session) -> List[Reel]:
    """Active reels ordered by category, then reel number."""
    rows = (
        db.query(ReelRow)
        .filter(ReelRow.is_active.is_(True))
        .order_by(ReelRow.category, ReelRow.reel_number)
        .all()
    )
    return [Reel.from_row(row) for row in rows]


def get_reel(db: Session, reel_id: str) -> Optional[ReelRow]:
    return db.query(ReelRow).filter(ReelRow.id == reel_id).first()


def create_reel(db: Session, reel: ReelCreate) -> Reel:
    """Register a reel. Reel ids are stable and chosen by the organizer."""
    if get_reel(db, reel.id):
        raise ValueError("Reel with this id already exists")

    existing_number = db.query(ReelRow).filter(
        ReelRow.category == reel.category,
        ReelRow.reel_number == reel.number
    ).first()
    if existing_number:
        raise ValueError("Reel number already used in this category")

    row = ReelRow(
        id=reel.id,
        reel_number=reel.number,
        contestant_name=reel.contestant,
        category=reel.category,
        duration_seconds=reel.duration,
        thumbnail_icon=reel.thumbnail,
        video_url=reel.video_url,
        is_active=reel.is_active,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return Reel.from_row(row)


def derive_categories(reels: List[Reel]) -> List[str]:
    """Distinct categories in first-seen order."""
    categories: List[str] = []
    for reel in reels:
        if reel.category not in categories:
            categories.append(reel.category)
    return categories
