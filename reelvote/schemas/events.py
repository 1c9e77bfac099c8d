"""Realtime event schemas.

The broadcast fabric carries a closed set of event kinds. Each kind has one
payload model; ``parse_payload`` turns a raw wire payload into that model so
handlers never see untyped dicts. Payload keys on the wire are camelCase.
"""
from enum import Enum
from typing import Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from reelvote.schemas.vote import VoterType


class EventType(str, Enum):
    REEL_CHANGE = "reel-change"
    VOTE = "vote"
    STATE_REQUEST = "state-request"
    STATE_SYNC = "state-sync"
    CATEGORY_CHANGE = "category-change"


class LiveStatus(str, Enum):
    WAITING = "waiting"
    LIVE = "live"
    ENDED = "ended"


class PageRole(str, Enum):
    CONTROL = "control"
    JUDGE = "judge"
    RESULTS = "results"
    AUDIENCE = "audience"


class ConnectionStatus(str, Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    RECONNECTING = "reconnecting"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        """Serialize with camelCase keys, leaving out fields that were never set."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class LiveState(_WireModel):
    """What is showing right now. Used as the reel-change and state-sync payload."""

    reel_id: Optional[str] = Field(None, alias="reelId")
    reel_index: Optional[int] = Field(None, alias="reelIndex")
    status: LiveStatus = LiveStatus.WAITING
    category: Optional[str] = None

    def merged(self, update: "LiveState") -> "LiveState":
        """Shallow merge: every field present in ``update`` wins."""
        return self.model_copy(update=update.model_dump(exclude_unset=True))

    def snapshot(self) -> "LiveState":
        """A copy with every field marked as set, so ``to_wire`` sends all of them."""
        return LiveState(**self.model_dump())


class VoteEvent(_WireModel):
    reel_id: str = Field(..., alias="reelId")
    score: int
    voter_type: VoterType = Field(..., alias="voterType")
    voter_id: str = Field(..., alias="voterId")


class StateRequest(_WireModel):
    requester_id: str = Field(..., alias="requesterId")
    timestamp: int


class CategoryChange(_WireModel):
    category: Optional[str] = None


PAYLOAD_MODELS: Dict[EventType, Type[_WireModel]] = {
    EventType.REEL_CHANGE: LiveState,
    EventType.VOTE: VoteEvent,
    EventType.STATE_REQUEST: StateRequest,
    EventType.STATE_SYNC: LiveState,
    EventType.CATEGORY_CHANGE: CategoryChange,
}


def parse_payload(event: EventType, payload: dict) -> BaseModel:
    """Validate a raw payload against the model registered for ``event``."""
    return PAYLOAD_MODELS[event].model_validate(payload)


class PresenceMeta(BaseModel):
    """One presence record per connected client session."""

    device_id: str
    page_role: PageRole = PageRole.AUDIENCE
    joined_at: str


def count_connected_devices(state: Dict[str, List[dict]]) -> int:
    """
    Count presence records that are not control panels.

    ``state`` maps a presence key to the records tracked under it, as sent in
    presence sync frames. The count is derived from membership alone.
    """
    return sum(
        1
        for records in state.values()
        for record in records
        if record.get("page_role") != PageRole.CONTROL.value
    )
