"""Live state reconciliation.

The control panel holds the authoritative ``LiveState``. Everyone else keeps
a replica fed by ``reel-change`` and ``state-sync`` broadcasts, and asks for
a fresh copy with ``state-request`` each time its channel (re)connects.
"""
import asyncio
from enum import Enum
from typing import Any, Callable, List, Optional

from reelvote.client.catalog import ReelCatalog
from reelvote.client.channel import RealtimeChannel
from reelvote.core.logging_config import get_logger
from reelvote.core.utils import epoch_millis
from reelvote.schemas import Reel
from reelvote.schemas.events import (
    CategoryChange,
    ConnectionStatus,
    EventType,
    LiveState,
    LiveStatus,
    PageRole,
    StateRequest,
)

logger = get_logger(__name__)


class SyncPhase(str, Enum):
    UNSYNCED = "unsynced"
    SYNCED = "synced"
    STALE = "stale"


class LiveStateReconciler:
    def __init__(
        self,
        channel: RealtimeChannel,
        role: PageRole,
        requester_id: str,
        state_request_delay: float = 0.5,
        initial: Optional[LiveState] = None,
    ):
        self.channel = channel
        self.role = role
        self.requester_id = requester_id
        self.state_request_delay = state_request_delay
        self.state = initial or LiveState()
        self.phase = SyncPhase.UNSYNCED
        self._request_handle: Optional[asyncio.TimerHandle] = None
        self._listeners: List[Callable[[LiveState], Any]] = []
        self._category_listeners: List[Callable[[Optional[str]], Any]] = []

        channel.on(EventType.REEL_CHANGE, self._apply)
        channel.on(EventType.STATE_SYNC, self._apply)
        channel.on(EventType.CATEGORY_CHANGE, self._on_category_change)
        if self.is_control:
            channel.on(EventType.STATE_REQUEST, self._answer_request)
        channel.on_status(self._on_status)

    @property
    def is_control(self) -> bool:
        return self.role == PageRole.CONTROL

    def on_change(self, listener: Callable[[LiveState], Any]) -> None:
        self._listeners.append(listener)

    def on_category_change(self, listener: Callable[[Optional[str]], Any]) -> None:
        self._category_listeners.append(listener)

    def current_reel(self, catalog: ReelCatalog) -> Optional[Reel]:
        """The live reel, or the first reel when nothing (known) is live."""
        if self.state.reel_id:
            return catalog.find(self.state.reel_id) or catalog.first()
        return catalog.first()

    # Control panel operations

    def show_reel(self, reel_id: str, reel_index: Optional[int] = None) -> None:
        fields = {"reel_id": reel_id, "status": LiveStatus.LIVE}
        if reel_index is not None:
            fields["reel_index"] = reel_index
        self._publish(EventType.REEL_CHANGE, LiveState(**fields))

    def set_status(self, status: LiveStatus) -> None:
        self._publish(EventType.REEL_CHANGE, LiveState(status=status))

    def change_category(self, category: Optional[str]) -> None:
        self._merge(LiveState(category=category))
        self.channel.broadcast(EventType.CATEGORY_CHANGE, CategoryChange(category=category))

    def _publish(self, event: EventType, update: LiveState) -> None:
        # Apply locally first; our own echo merges the same fields again
        self._merge(update)
        self.channel.broadcast(event, update)

    # Channel callbacks

    def _on_status(self, status: ConnectionStatus) -> None:
        if status == ConnectionStatus.CONNECTED:
            self.phase = SyncPhase.SYNCED
            if not self.is_control:
                self._schedule_state_request()
        elif self.phase == SyncPhase.SYNCED:
            self.phase = SyncPhase.STALE
            self._cancel_state_request()

    def _schedule_state_request(self) -> None:
        # Gives a control panel joining at the same moment time to subscribe
        self._cancel_state_request()
        loop = asyncio.get_running_loop()
        self._request_handle = loop.call_later(self.state_request_delay, self._send_state_request)

    def _cancel_state_request(self) -> None:
        if self._request_handle is not None:
            self._request_handle.cancel()
            self._request_handle = None

    def _send_state_request(self) -> None:
        self._request_handle = None
        if not self.channel.is_connected:
            return
        logger.info("state_requested", requester_id=self.requester_id)
        self.channel.broadcast(
            EventType.STATE_REQUEST,
            StateRequest(requester_id=self.requester_id, timestamp=epoch_millis()),
        )

    def _answer_request(self, request: StateRequest) -> None:
        logger.info("state_request_answered", requester_id=request.requester_id)
        self.channel.broadcast(EventType.STATE_SYNC, self.state.snapshot())

    def _apply(self, update: LiveState) -> None:
        self._merge(update)

    def _merge(self, update: LiveState) -> None:
        self.state = self.state.merged(update)
        for listener in list(self._listeners):
            listener(self.state)

    def _on_category_change(self, change: CategoryChange) -> None:
        for listener in list(self._category_listeners):
            listener(change.category)

    def close(self) -> None:
        self._cancel_state_request()
