"""Application constants.

This module contains magic strings and numbers used throughout the application.
Centralizing these values makes them easier to maintain and modify.
"""

# Scores
# Votes are whole numbers on a 1-10 scale for both audience and judges
SCORE_MIN = 1
SCORE_MAX = 10

# Voter / token roles
VOTER_TYPES = ("audience", "judge")

# Device types reported by clients
DEVICE_TYPES = ("desktop", "mobile", "tablet")

# Device ids are "device-" followed by a UUID4
DEVICE_ID_PREFIX = "device-"

# Token Configuration
# Redemption codes are short, upper-case and easy to read aloud
TOKEN_CODE_LENGTH = 6
TOKEN_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

# Local persisted keys (the client's durable session)
DEVICE_ID_KEY = "reelvote-device-id"
VOTER_ID_KEY = "reelvote-voter-id"
TOKEN_KEY = "reelvote-token"
TOKEN_DATA_KEY = "reelvote-token-data"
IDENTITY_SESSION_KEY = "reelvote-identity-session"

# Cache keys shared by endpoints that invalidate each other
ACTIVE_REELS_CACHE_KEY = "active_reels"
RESULTS_CACHE_KEY = "results"

# JWT Token Configuration
# Token expiration time in minutes (8 hours)
ACCESS_TOKEN_EXPIRE_MINUTES = 480
