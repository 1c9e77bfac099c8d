"""General utility functions."""
import time
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def epoch_millis() -> int:
    """Milliseconds since the epoch, as carried in state-request payloads."""
    return int(time.time() * 1000)
