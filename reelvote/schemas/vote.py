"""Vote schemas."""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reelvote.core.constants import SCORE_MAX, SCORE_MIN
from reelvote.core.sanitization import sanitize_category, sanitize_person_name

VoterType = Literal["audience", "judge"]


class VoteUpsert(BaseModel):
    reel_id: str = Field(..., min_length=1, max_length=64)
    voter_id: str = Field(..., min_length=1, max_length=36)
    score: int = Field(..., ge=SCORE_MIN, le=SCORE_MAX)
    voter_type: VoterType = "audience"
    voter_name: Optional[str] = Field(None, max_length=120)
    category: Optional[str] = Field(None, max_length=80)

    @field_validator('voter_name')
    @classmethod
    def sanitize_voter_name_field(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return sanitize_person_name(v)
        return v

    @field_validator('category')
    @classmethod
    def sanitize_category_field(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return sanitize_category(v)
        return v


class VoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    reel_id: str
    voter_id: str
    score: int
    voter_type: VoterType
    voter_name: Optional[str] = None
    category: Optional[str] = None
    updated_at: Optional[datetime] = None
