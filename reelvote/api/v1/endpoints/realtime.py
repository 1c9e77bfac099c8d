"""WebSocket entry point to the broadcast hub."""
import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from reelvote.api.deps import realtime_hub
from reelvote.core.logging_config import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.websocket("/realtime")
async def realtime_endpoint(websocket: WebSocket):
    """
    Join the live channel.

    Client frames are ``broadcast`` (fanned out to every member, sender
    included) and ``presence`` track/untrack. A malformed frame gets an
    ``error`` frame back and the socket stays open.
    """
    await websocket.accept()
    conn = await realtime_hub.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
                if not isinstance(message, dict):
                    raise ValueError("Frame must be a JSON object")
                await realtime_hub.handle(conn, message)
            except ValueError as e:
                logger.info("realtime_frame_rejected", connection_id=conn.id, error=str(e))
                await websocket.send_json({"type": "error", "message": str(e)})
    except WebSocketDisconnect:
        pass
    finally:
        await realtime_hub.disconnect(conn)
