"""Realtime channel: typed pub/sub over a transport, with presence."""
import asyncio
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Set, Tuple, Union

from pydantic import BaseModel, ValidationError

from reelvote.client.transport import Transport
from reelvote.core.logging_config import get_logger
from reelvote.core.utils import utcnow
from reelvote.schemas.events import (
    ConnectionStatus,
    EventType,
    PageRole,
    PresenceMeta,
    count_connected_devices,
    parse_payload,
)

logger = get_logger(__name__)

Handler = Callable[[Any], Any]


class RealtimeChannel:
    """
    One client's membership in the live channel.

    ``broadcast`` while not connected queues the event in memory; the queue
    is flushed in order as soon as the transport reports ``CONNECTED``, right
    after presence is (re)tracked. Handlers may be plain callables or
    coroutine functions and receive the validated payload model for their
    event type.
    """

    def __init__(self, transport: Transport, device_id: str, page_role: PageRole = PageRole.AUDIENCE):
        self.transport = transport
        self.device_id = device_id
        self.page_role = page_role
        self.status = ConnectionStatus.DISCONNECTED
        self.presence_state: Dict[str, List[dict]] = {}
        self.connected_devices = 0

        self._handlers: Dict[EventType, List[Handler]] = {event: [] for event in EventType}
        self._status_listeners: List[Callable[[ConnectionStatus], Any]] = []
        self._presence_listeners: List[Callable[[int], Any]] = []
        self._pending: Deque[Tuple[EventType, dict]] = deque()
        self._tasks: Set[asyncio.Task] = set()

        transport.on_frame = self._on_frame
        transport.on_status = self._on_status

    @property
    def is_connected(self) -> bool:
        return self.status == ConnectionStatus.CONNECTED

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def connect(self) -> None:
        await self.transport.connect()

    async def close(self) -> None:
        await self.transport.close()
        for task in list(self._tasks):
            task.cancel()

    def broadcast(self, event: EventType, payload: Union[BaseModel, dict]) -> None:
        """Publish to every member, this one included. Never blocks."""
        if isinstance(payload, dict):
            payload = parse_payload(event, payload)
        wire = payload.to_wire()

        if self.is_connected:
            self._send(event, wire)
        else:
            self._pending.append((event, wire))
            logger.debug("broadcast_queued", event_type=event.value, pending=len(self._pending))

    def on(self, event: EventType, handler: Handler) -> None:
        self._handlers[event].append(handler)

    def off(self, event: EventType, handler: Handler) -> None:
        handlers = self._handlers[event]
        if handler in handlers:
            handlers.remove(handler)

    def on_status(self, listener: Callable[[ConnectionStatus], Any]) -> None:
        self._status_listeners.append(listener)

    def on_presence(self, listener: Callable[[int], Any]) -> None:
        """Called with the connected (non-control) device count after every presence sync."""
        self._presence_listeners.append(listener)

    def _send(self, event: EventType, wire: dict) -> None:
        self.transport.send({"type": "broadcast", "event": event.value, "payload": wire})

    def _track_presence(self) -> None:
        meta = PresenceMeta(
            device_id=self.device_id,
            page_role=self.page_role,
            joined_at=utcnow().isoformat(),
        )
        self.transport.send({"type": "presence", "action": "track", "payload": meta.model_dump(mode="json")})

    def _on_status(self, status: ConnectionStatus) -> None:
        self.status = status
        logger.info("channel_status", status=status.value, device_id=self.device_id)

        if status == ConnectionStatus.CONNECTED:
            self._track_presence()
            flushed = 0
            while self._pending:
                event, wire = self._pending.popleft()
                self._send(event, wire)
                flushed += 1
            if flushed:
                logger.info("broadcast_queue_flushed", count=flushed)

        for listener in list(self._status_listeners):
            self._invoke(listener, status)

    def _on_frame(self, frame: dict) -> None:
        kind = frame.get("type")
        if kind == "broadcast":
            self._dispatch(frame)
        elif kind == "presence" and frame.get("event") == "sync":
            self.presence_state = frame.get("state") or {}
            self.connected_devices = count_connected_devices(self.presence_state)
            for listener in list(self._presence_listeners):
                self._invoke(listener, self.connected_devices)
        elif kind == "error":
            logger.warning("channel_frame_rejected", message=frame.get("message"))

    def _dispatch(self, frame: dict) -> None:
        try:
            event = EventType(frame.get("event"))
        except ValueError:
            logger.warning("channel_unknown_event", event_type=frame.get("event"))
            return
        try:
            payload = parse_payload(event, frame.get("payload") or {})
        except ValidationError as e:
            logger.warning("channel_payload_invalid", event_type=event.value, errors=e.error_count())
            return

        for handler in list(self._handlers[event]):
            self._invoke(handler, payload)

    def _invoke(self, handler: Callable, arg: Any) -> None:
        try:
            result = handler(arg)
        except Exception:
            logger.exception("channel_handler_failed", handler=getattr(handler, "__qualname__", repr(handler)))
            return
        if asyncio.iscoroutine(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("channel_handler_failed", error=str(task.exception()))
