"""Shared API dependencies."""
from reelvote.core.cache import global_cache
from reelvote.core.config import settings
from reelvote.core.security import verify_admin_token
from reelvote.db import get_db, get_db_context
from reelvote.realtime import realtime_hub


def get_scoring_policy() -> str:
    """Name of the final-score formula applied on every vote write."""
    return settings.SCORING_POLICY


__all__ = [
    "get_db",
    "get_db_context",
    "get_scoring_policy",
    "global_cache",
    "realtime_hub",
    "verify_admin_token",
]
