"""Shared response models."""
from typing import Optional

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """Acknowledgement for writes that return no resource (admin login and logout)."""

    success: bool = True
    message: Optional[str] = None
