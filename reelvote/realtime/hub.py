"""In-process broadcast hub with presence.

Every connected socket is a member of one channel. Broadcast frames are fanned
out to all members, the sender included. Presence records are keyed by
connection and a full ``presence/sync`` frame goes out whenever membership
changes.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from reelvote.core.logging_config import get_logger
from reelvote.schemas.events import EventType, PresenceMeta, count_connected_devices

logger = get_logger(__name__)


@dataclass
class Connection:
    """A member socket; ``socket`` only needs an async ``send_json``."""

    socket: Any
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    presence: Optional[dict] = None


class BroadcastHub:
    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def presence_state(self) -> Dict[str, List[dict]]:
        return {
            conn.id: [conn.presence]
            for conn in self._connections.values()
            if conn.presence is not None
        }

    def connected_devices(self) -> int:
        return count_connected_devices(self.presence_state())

    async def connect(self, socket: Any) -> Connection:
        """Register a socket and send it the current presence state."""
        conn = Connection(socket=socket)
        self._connections[conn.id] = conn
        logger.info("hub_member_joined", connection_id=conn.id, members=len(self._connections))
        await self._send(conn, self._presence_frame())
        return conn

    async def disconnect(self, conn: Connection) -> None:
        self._connections.pop(conn.id, None)
        logger.info("hub_member_left", connection_id=conn.id, members=len(self._connections))
        if conn.presence is not None:
            conn.presence = None
            await self._publish_presence()

    async def handle(self, conn: Connection, message: dict) -> None:
        """
        Apply one client frame.

        Raises:
            ValueError: the frame is malformed or names an unknown event
        """
        kind = message.get("type")
        if kind == "broadcast":
            try:
                event = EventType(message.get("event"))
            except ValueError:
                raise ValueError(f"Unknown event: {message.get('event')!r}")
            payload = message.get("payload")
            if not isinstance(payload, dict):
                raise ValueError("Broadcast payload must be an object")
            await self.broadcast(event, payload)
        elif kind == "presence":
            action = message.get("action")
            if action == "track":
                try:
                    meta = PresenceMeta.model_validate(message.get("payload") or {})
                except ValidationError as e:
                    raise ValueError(f"Invalid presence payload: {e.errors()[0]['msg']}")
                conn.presence = meta.model_dump(mode="json")
            elif action == "untrack":
                conn.presence = None
            else:
                raise ValueError(f"Unknown presence action: {action!r}")
            await self._publish_presence()
        else:
            raise ValueError(f"Unknown frame type: {kind!r}")

    async def broadcast(self, event: EventType, payload: dict) -> None:
        frame = {"type": "broadcast", "event": event.value, "payload": payload}
        for conn in list(self._connections.values()):
            await self._send(conn, frame)

    async def _publish_presence(self) -> None:
        frame = self._presence_frame()
        for conn in list(self._connections.values()):
            await self._send(conn, frame)

    def _presence_frame(self) -> dict:
        return {"type": "presence", "event": "sync", "state": self.presence_state()}

    async def _send(self, conn: Connection, frame: dict) -> None:
        try:
            await conn.socket.send_json(frame)
        except Exception as e:
            # Dead socket; its receive loop will also end and call disconnect
            logger.warning("hub_send_failed", connection_id=conn.id, error=str(e))
            self._connections.pop(conn.id, None)


# One fabric per process; members on other workers are not reached
realtime_hub = BroadcastHub()
