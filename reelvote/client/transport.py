"""Frame transports between a RealtimeChannel and the broadcast fabric.

Frames are plain JSON-compatible dicts in the hub's wire format. Outgoing
frames go through an in-order outbox drained by one writer task per
connection; incoming frames and status changes are reported through the
``on_frame`` / ``on_status`` callbacks the channel installs.
"""
import asyncio
import json
from collections import deque
from typing import Awaitable, Callable, Deque, Optional

import websockets
from websockets.exceptions import WebSocketException

from reelvote.core.logging_config import get_logger
from reelvote.realtime.hub import BroadcastHub, Connection
from reelvote.schemas.events import ConnectionStatus

logger = get_logger(__name__)


def _ignore(*args) -> None:
    pass


class Transport:
    def __init__(self):
        self.on_frame: Callable[[dict], None] = _ignore
        self.on_status: Callable[[ConnectionStatus], None] = _ignore
        self.status = ConnectionStatus.DISCONNECTED
        self._outbox: Deque[dict] = deque()
        self._wakeup = asyncio.Event()

    async def connect(self) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError

    def send(self, frame: dict) -> None:
        """Queue a frame; it is written once a connection is up."""
        self._outbox.append(frame)
        self._wakeup.set()

    def _set_status(self, status: ConnectionStatus) -> None:
        if status == self.status:
            return
        self.status = status
        logger.debug("transport_status", transport=type(self).__name__, status=status.value)
        self.on_status(status)

    def _receive(self, frame: dict) -> None:
        if not isinstance(frame, dict):
            logger.warning("transport_frame_ignored", reason="not an object")
            return
        self.on_frame(frame)

    async def _drain(self, write: Callable[[dict], Awaitable[None]]) -> None:
        # A frame leaves the outbox only after it was written
        while True:
            while self._outbox:
                await write(self._outbox[0])
                self._outbox.popleft()
            self._wakeup.clear()
            await self._wakeup.wait()


class WebSocketTransport(Transport):
    """
    Transport over a WebSocket to the service hub (``/api/v1/realtime``).

    Runs one background task that connects, reads until the socket drops,
    waits ``reconnect_delay`` seconds and tries again until ``close()``.
    """

    def __init__(self, url: str, reconnect_delay: float = 1.0, open_timeout: float = 10.0):
        super().__init__()
        self.url = url
        self.reconnect_delay = reconnect_delay
        self.open_timeout = open_timeout
        self._task: Optional[asyncio.Task] = None
        self._socket = None
        self._closing = False

    async def connect(self) -> None:
        if self._task is not None:
            return
        self._closing = False
        self._task = asyncio.create_task(self._run())

    async def close(self) -> None:
        self._closing = True
        if self._socket is not None:
            await self._socket.close()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._set_status(ConnectionStatus.DISCONNECTED)

    async def _run(self) -> None:
        attempts = 0
        while not self._closing:
            self._set_status(ConnectionStatus.CONNECTING if attempts == 0 else ConnectionStatus.RECONNECTING)
            attempts += 1
            try:
                async with websockets.connect(self.url, open_timeout=self.open_timeout) as socket:
                    await self._serve(socket)
            except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                logger.warning("realtime_connection_lost", url=self.url, attempt=attempts, error=str(e))

            if self._closing:
                break
            self._set_status(ConnectionStatus.DISCONNECTED)
            await asyncio.sleep(self.reconnect_delay)

    async def _serve(self, socket) -> None:
        async def write(frame: dict) -> None:
            await socket.send(json.dumps(frame))

        self._socket = socket
        self._set_status(ConnectionStatus.CONNECTED)
        writer = asyncio.create_task(self._drain(write))
        try:
            async for raw in socket:
                try:
                    frame = json.loads(raw)
                except ValueError:
                    logger.warning("realtime_frame_undecodable", size=len(raw))
                    continue
                self._receive(frame)
        finally:
            writer.cancel()
            await asyncio.gather(writer, return_exceptions=True)
            self._socket = None


class LocalTransport(Transport):
    """
    Transport wired straight into an in-process ``BroadcastHub``.

    Used for single-process local mode and tests. Delivery to this member is
    deferred with ``call_soon`` so handlers never run inside the sender's
    call stack. ``drop()`` and ``connect()`` simulate losing and regaining
    the network.
    """

    def __init__(self, hub: BroadcastHub):
        super().__init__()
        self.hub = hub
        self._conn: Optional[Connection] = None
        self._writer: Optional[asyncio.Task] = None

    async def connect(self) -> None:
        if self._conn is not None:
            return
        self._set_status(ConnectionStatus.CONNECTING)
        self._conn = await self.hub.connect(self)
        self._set_status(ConnectionStatus.CONNECTED)
        self._writer = asyncio.create_task(self._drain(self._write))

    async def drop(self) -> None:
        """Leave the hub as if the network went away. Queued frames are kept."""
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        if self._writer is not None:
            self._writer.cancel()
            await asyncio.gather(self._writer, return_exceptions=True)
            self._writer = None
        await self.hub.disconnect(conn)
        self._set_status(ConnectionStatus.DISCONNECTED)

    async def close(self) -> None:
        await self.drop()

    async def send_json(self, frame: dict) -> None:
        """Called by the hub to deliver a frame to this member."""
        asyncio.get_running_loop().call_soon(self._deliver, frame)

    def _deliver(self, frame: dict) -> None:
        if self._conn is not None:
            self._receive(frame)

    async def _write(self, frame: dict) -> None:
        try:
            await self.hub.handle(self._conn, frame)
        except ValueError as e:
            logger.warning("realtime_frame_rejected", error=str(e))
