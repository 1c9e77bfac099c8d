"""Error taxonomy shared by the service layer and the client core.

Every error carries a user-facing ``message``. They subclass ``ValueError`` so
endpoint code can keep translating ``ValueError`` into a 4xx response.
"""
from typing import Optional


class ReelVoteError(ValueError):
    """Base class for all domain errors."""

    message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotRegistered(ReelVoteError):
    """No voter id is available for this device; voting is blocked."""

    message = "Voter not registered"


class RegistrationFailed(ReelVoteError):
    """The voter upsert did not yield a voter id during signup."""

    message = "Failed to register device with database"


class InvalidToken(ReelVoteError):
    message = "Invalid token"


class TokenBoundElsewhere(ReelVoteError):
    message = "Token already used on another device"


class TokenLookupTimeout(ReelVoteError):
    message = "Request timed out"


class StoreError(ReelVoteError):
    """The backing store answered with an unexpected status."""

    message = "Store request failed"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StoreUnavailable(StoreError):
    """No connection to the backing store could be established."""

    message = "Not connected to server"


class WriteConflict(ReelVoteError):
    """A concurrent write hit the same key; resolved by upsert, never surfaced to users."""

    message = "Write conflict"


class LinkConflict(ReelVoteError):
    """The email or identity is already linked to another voter."""

    message = "Email already linked to another voter"
