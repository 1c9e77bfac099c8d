"""Reel schemas."""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reelvote.core.sanitization import sanitize_category, sanitize_person_name


class Reel(BaseModel):
    """Reel reference data as seen by clients."""

    id: str
    number: int
    contestant: str
    category: str
    duration: int = 0
    thumbnail: Optional[str] = None
    video_url: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Reel":
        """Map a ``reels`` row onto the client-facing field names."""
        return cls(
            id=row.id,
            number=row.reel_number,
            contestant=row.contestant_name,
            category=row.category,
            duration=row.duration_seconds or 0,
            thumbnail=row.thumbnail_icon,
            video_url=row.video_url,
        )


class ReelCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")
    number: int = Field(..., ge=1)
    contestant: str = Field(..., min_length=1, max_length=120)
    category: str = Field(..., min_length=1, max_length=80)
    duration: int = Field(0, ge=0)
    thumbnail: Optional[str] = Field(None, max_length=200)
    video_url: Optional[str] = Field(None, max_length=500)
    is_active: bool = True

    @field_validator('contestant')
    @classmethod
    def sanitize_contestant_field(cls, v: str) -> str:
        return sanitize_person_name(v)

    @field_validator('category')
    @classmethod
    def sanitize_category_field(cls, v: str) -> str:
        return sanitize_category(v)


class ReelStats(BaseModel):
    """Per-reel vote summary; all zero when the reel has no aggregate yet."""

    audience_count: int = 0
    judge_count: int = 0
    audience_avg: float = 0.0
    judge_avg: float = 0.0
    final_score: float = 0.0
    total_votes: int = 0

    @classmethod
    def from_aggregate(cls, aggregate: Optional["AggregateRead"]) -> "ReelStats":
        if aggregate is None:
            return cls()
        return cls(
            audience_count=aggregate.audience_count or 0,
            judge_count=aggregate.judge_count or 0,
            audience_avg=aggregate.audience_average or 0.0,
            judge_avg=aggregate.judge_average or 0.0,
            final_score=aggregate.final_score or 0.0,
            total_votes=(aggregate.audience_count or 0) + (aggregate.judge_count or 0),
        )


class ReelWithStats(Reel):
    stats: ReelStats = Field(default_factory=ReelStats)


class AggregateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    reel_id: str
    audience_count: int = 0
    judge_count: int = 0
    audience_average: float = 0.0
    judge_average: float = 0.0
    final_score: float = 0.0


def merge_reel_stats(
    reels: List[Reel],
    aggregates: List[AggregateRead],
    category: Optional[str] = None,
) -> List[ReelWithStats]:
    """
    Attach aggregate stats to reels, best final score first.

    Reels without an aggregate row get all-zero stats. ``category`` limits the
    result to one category.
    """
    by_reel = {aggregate.reel_id: aggregate for aggregate in aggregates}
    merged = [
        ReelWithStats(**reel.model_dump(), stats=ReelStats.from_aggregate(by_reel.get(reel.id)))
        for reel in reels
        if category is None or reel.category == category
    ]
    return sorted(merged, key=lambda item: item.stats.final_score, reverse=True)
