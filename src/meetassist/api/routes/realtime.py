"""WebSocket endpoint for live meeting updates.

Message format, both directions:

    {"event": "<name>", "data": {...}}

Authentication uses the `token` query parameter since browsers cannot set
headers on a WebSocket handshake.
"""

from __future__ import annotations

import json

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from src.meetassist.api.deps import resolve_user
from src.meetassist.core.errors import ApiError
from src.meetassist.realtime.events import EventDispatcher, SocketSession

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def realtime_websocket(websocket: WebSocket, token: str | None = None) -> None:
    state = websocket.app.state
    user_repository = getattr(state, "user_repository", None)
    manager = getattr(state, "connection_manager", None)
    if user_repository is None or manager is None:
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Authentication required")
        return
    try:
        user = await resolve_user(user_repository, token)
    except ApiError as e:
        logger.info("websocket.auth_failed", error_code=e.error_code)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
        return

    await websocket.accept()
    manager.register(websocket, user.id)
    session = SocketSession(websocket=websocket, user=user)
    dispatcher = EventDispatcher(manager, state)
    logger.info("websocket.connected", user_id=str(user.id))

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", status.WS_1000_NORMAL_CLOSURE))
            raw = frame.get("text")
            if raw is None:
                await manager.send(websocket, "error", {"message": "Invalid JSON"})
                continue
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                await manager.send(websocket, "error", {"message": "Invalid JSON"})
                continue
            if not isinstance(message, dict) or not isinstance(message.get("event"), str):
                await manager.send(
                    websocket, "error", {"message": "Message must have an event name"}
                )
                continue
            await dispatcher.dispatch(session, message["event"], message.get("data"))
    except WebSocketDisconnect:
        logger.info("websocket.disconnected", user_id=str(user.id))
    finally:
        manager.unregister(websocket)
