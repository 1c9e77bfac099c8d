"""Pydantic schemas for request/response validation and realtime payloads."""
from reelvote.schemas.auth import AdminLoginRequest
from reelvote.schemas.common import SuccessResponse
from reelvote.schemas.reel import Reel, ReelCreate, ReelStats, ReelWithStats, AggregateRead, merge_reel_stats
from reelvote.schemas.voter import VoterUpsert, VoterIdentityUpdate, VoterRead
from reelvote.schemas.token import (
    TokenRead,
    TokenClaimRequest,
    TokenVoterLink,
    TokenIssue,
    TokenIssueRequest,
    TokenValidation,
)
from reelvote.schemas.vote import VoteUpsert, VoteRead
from reelvote.schemas.events import (
    EventType,
    LiveStatus,
    PageRole,
    ConnectionStatus,
    LiveState,
    VoteEvent,
    StateRequest,
    CategoryChange,
    PresenceMeta,
    parse_payload,
    count_connected_devices,
)

__all__ = [
    "AdminLoginRequest",
    "SuccessResponse",
    "Reel",
    "ReelCreate",
    "ReelStats",
    "ReelWithStats",
    "AggregateRead",
    "merge_reel_stats",
    "VoterUpsert",
    "VoterIdentityUpdate",
    "VoterRead",
    "TokenRead",
    "TokenClaimRequest",
    "TokenVoterLink",
    "TokenIssue",
    "TokenIssueRequest",
    "TokenValidation",
    "VoteUpsert",
    "VoteRead",
    "EventType",
    "LiveStatus",
    "PageRole",
    "ConnectionStatus",
    "LiveState",
    "VoteEvent",
    "StateRequest",
    "CategoryChange",
    "PresenceMeta",
    "parse_payload",
    "count_connected_devices",
]
