"""
WebSocket endpoint for the live wall.

Accepts connections at /ws. Every connection is a viewer; any viewer may
also submit answers. All wall mutations go through wall_service.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from server.services.wall_service import SERVER_ERROR, wall_service
from wall.kernel.errors import AuthorizationFailure, WallError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


async def _handle_submission(websocket: WebSocket, msg: dict[str, Any]) -> None:
    """
    Handle a submission:new message.

    Protocol:
      Client sends: {"type": "submission:new", "name": "...", "region": "...", "answerDataUrl": "data:image/png;base64,..."}
      Everyone gets: {"type": "tile:update", "index": n, "tile": {...}}
      Submitter gets: {"type": "submission:ok", "placedAt": n + 1}
                  or: {"type": "submission:error", "message": "..."}
    """
    broadcaster = wall_service.broadcaster
    try:
        index = await wall_service.submit(msg)
    except WallError as e:
        logger.info("ws: submission rejected: %s", e.message)
        await broadcaster.send(websocket, "submission:error", {"message": e.message})
        return
    except Exception:
        logger.exception("ws: unexpected submission failure")
        await broadcaster.send(websocket, "submission:error", {"message": SERVER_ERROR})
        return

    await broadcaster.send(websocket, "submission:ok", {"placedAt": index + 1})


async def _handle_clear_all(websocket: WebSocket, msg: dict[str, Any]) -> None:
    """
    Handle an admin:clearAll message.

    Protocol:
      Client sends: {"type": "admin:clearAll", "key": "<ADMIN_KEY>"}
      Everyone gets: {"type": "state:init", "question": "...", "tiles": [...]}
      Requester gets: {"type": "admin:ok", ...} or {"type": "admin:error", ...}
    """
    broadcaster = wall_service.broadcaster
    key = msg.get("key")
    if isinstance(key, str):
        key = key.strip()

    try:
        await wall_service.reset(key)
    except AuthorizationFailure as e:
        logger.warning("ws: admin:clearAll refused")
        await broadcaster.send(websocket, "admin:error", {"message": e.message})
        return

    await broadcaster.send(websocket, "admin:ok", {"message": "Wall cleared successfully."})


@router.websocket("/ws")
async def wall_websocket(websocket: WebSocket) -> None:
    """
    Keep one viewer in sync with the wall.

    Protocol:
      Client → Server:  {"type": "submission:new", ...}
                        {"type": "admin:clearAll", "key": "..."}
      Server → Client:  state:init on connect, then tile:update / state:init
                        as the wall changes, plus private acks and errors.
    """
    await websocket.accept()
    await wall_service.connect(websocket)
    logger.info("WebSocket accepted: %d viewers", len(wall_service.broadcaster))

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            raw = message.get("text")
            if raw is None:
                logger.debug("ws: ignoring binary frame")
                continue

            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("ws: malformed message from client: %r", raw[:200])
                continue

            if not isinstance(msg, dict):
                continue

            msg_type = msg.get("type")

            if msg_type == "submission:new":
                await _handle_submission(websocket, msg)
                continue

            if msg_type == "admin:clearAll":
                await _handle_clear_all(websocket, msg)
                continue

            logger.debug("ws: ignoring message type %r", msg_type)

    except WebSocketDisconnect:
        logger.info("WebSocket disconnected")
    finally:
        wall_service.disconnect(websocket)
