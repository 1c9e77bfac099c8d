"""Voter schemas."""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reelvote.core.sanitization import sanitize_person_name, validate_email

DeviceType = Literal["desktop", "mobile", "tablet"]


class VoterUpsert(BaseModel):
    device_id: str = Field(..., min_length=1, max_length=64)
    device_type: DeviceType = "desktop"
    is_judge: bool = False
    judge_name: Optional[str] = Field(None, max_length=120)
    name: Optional[str] = Field(None, max_length=120)
    token_id: Optional[int] = None

    @field_validator('judge_name', 'name')
    @classmethod
    def sanitize_names(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return sanitize_person_name(v)
        return v


class VoterIdentityUpdate(BaseModel):
    email: str
    email_verified: bool = False
    auth_user_id: Optional[str] = Field(None, max_length=128)

    @field_validator('email')
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return validate_email(v)


class VoterRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    device_id: str
    device_type: str
    email: Optional[str] = None
    email_verified: bool = False
    auth_user_id: Optional[str] = None
    is_judge: bool = False
    judge_name: Optional[str] = None
    name: Optional[str] = None
    token_id: Optional[int] = None
    last_seen_at: Optional[datetime] = None
