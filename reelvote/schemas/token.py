"""Redemption token schemas."""
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reelvote.core.sanitization import sanitize_category, sanitize_person_name

TokenType = Literal["audience", "judge"]


class TokenRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    token: str
    token_type: TokenType
    person_name: str
    category: Optional[str] = None
    is_used: bool = False
    device_id: Optional[str] = None
    voter_id: Optional[str] = None
    used_at: Optional[datetime] = None


class TokenClaimRequest(BaseModel):
    device_id: str = Field(..., min_length=1, max_length=64)


class TokenVoterLink(BaseModel):
    voter_id: str = Field(..., min_length=1, max_length=36)


class TokenIssue(BaseModel):
    """One person to issue a token for."""

    person_name: str = Field(..., min_length=1, max_length=120)
    token_type: TokenType = "audience"
    category: Optional[str] = Field(None, max_length=80)

    @field_validator('person_name')
    @classmethod
    def sanitize_person_name_field(cls, v: str) -> str:
        return sanitize_person_name(v)

    @field_validator('category')
    @classmethod
    def sanitize_category_field(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return sanitize_category(v)
        return v


class TokenIssueRequest(BaseModel):
    tokens: List[TokenIssue] = Field(..., min_length=1, max_length=1000)


class TokenValidation(BaseModel):
    """Outcome of a client-side token redemption."""

    valid: bool
    error: Optional[str] = None
    token_data: Optional[TokenRead] = None
