"""In-process room registry for WebSocket connections."""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Any

import structlog
from fastapi import WebSocket, WebSocketDisconnect

from src.meetassist.core.monitoring import websocket_connections

logger = structlog.get_logger(__name__)


def user_room(user_id: uuid.UUID | str) -> str:
    return f"user_{user_id}"


def meeting_room(meeting_id: uuid.UUID | str) -> str:
    return f"meeting_{meeting_id}"


class ConnectionManager:
    """Tracks which sockets are in which rooms and fans messages out.

    A socket that fails while being written to is dropped from every room
    it belongs to; the failure is logged and not propagated to the caller.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, set[WebSocket]] = defaultdict(set)
        self._memberships: dict[WebSocket, set[str]] = {}

    def register(self, websocket: WebSocket, user_id: uuid.UUID) -> None:
        """Track an accepted socket and put it in its user's room."""
        self._memberships[websocket] = set()
        self.join(websocket, user_room(user_id))
        websocket_connections.inc()

    def unregister(self, websocket: WebSocket) -> None:
        rooms = self._memberships.pop(websocket, None)
        if rooms is None:
            return
        for room in rooms:
            members = self._rooms.get(room)
            if members is None:
                continue
            members.discard(websocket)
            if not members:
                del self._rooms[room]
        websocket_connections.dec()

    def join(self, websocket: WebSocket, room: str) -> None:
        self._rooms[room].add(websocket)
        self._memberships.setdefault(websocket, set()).add(room)

    def leave(self, websocket: WebSocket, room: str) -> None:
        members = self._rooms.get(room)
        if members is not None:
            members.discard(websocket)
            if not members:
                del self._rooms[room]
        rooms = self._memberships.get(websocket)
        if rooms is not None:
            rooms.discard(room)

    def rooms_of(self, websocket: WebSocket) -> set[str]:
        return set(self._memberships.get(websocket, ()))

    def room_size(self, room: str) -> int:
        return len(self._rooms.get(room, ()))

    @property
    def connection_count(self) -> int:
        return len(self._memberships)

    async def send(self, websocket: WebSocket, event: str, data: dict[str, Any]) -> None:
        """Send one event to a single socket."""
        try:
            await websocket.send_json({"event": event, "data": data})
        except (WebSocketDisconnect, RuntimeError):
            logger.warning("realtime.send_failed", socket_event=event, exc_info=True)
            self.unregister(websocket)

    async def broadcast(self, room: str, event: str, data: dict[str, Any]) -> int:
        """Send an event to every socket in a room, sender included.

        Returns:
            Number of sockets the event was delivered to.
        """
        delivered = 0
        for websocket in list(self._rooms.get(room, ())):
            try:
                await websocket.send_json({"event": event, "data": data})
                delivered += 1
            except (WebSocketDisconnect, RuntimeError):
                logger.warning(
                    "realtime.broadcast_failed", room=room, socket_event=event, exc_info=True
                )
                self.unregister(websocket)
        return delivered
