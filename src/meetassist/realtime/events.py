"""Client event handlers for the realtime socket.

Each handler receives the sender's session and the event's `data`
object. Handlers report user-facing failures by raising EventError; the
dispatcher turns that into an `error` event sent to the sender only.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field, ValidationError

from src.meetassist.agents.schemas import ParticipationLevel
from src.meetassist.core.monitoring import websocket_events_total
from src.meetassist.meetings.schemas import MeetingStatus, TranscriptFilter
from src.meetassist.realtime.manager import ConnectionManager, meeting_room, user_room
from src.meetassist.users.schemas import User

logger = structlog.get_logger(__name__)

TRANSCRIPT_FETCH_LIMIT = 1000
PARTICIPANT_FETCH_LIMIT = 500


class EventError(Exception):
    """A failure the sender should hear about."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass
class SocketSession:
    websocket: WebSocket
    user: User


# ── Payloads ─────────────────────────────────────────────────────────────────


class MeetingRef(BaseModel):
    meeting_id: uuid.UUID


class TranscriptionUpdate(MeetingRef):
    audio_chunk: str | None = None


class AgentControl(MeetingRef):
    agent_id: uuid.UUID
    action: str
    params: dict[str, Any] = Field(default_factory=dict)


class StatusChange(MeetingRef):
    new_status: MeetingStatus


def _user_payload(user: User) -> dict[str, Any]:
    return {"id": str(user.id), "email": user.email, "full_name": user.full_name}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ── Dispatcher ───────────────────────────────────────────────────────────────


Handler = Callable[[SocketSession, dict[str, Any]], Awaitable[None]]


class EventDispatcher:
    """Routes incoming socket events to handlers.

    Args:
        manager: Room registry used for joins and fan-out.
        state: The application's state object holding repositories and
            stub services.
    """

    def __init__(self, manager: ConnectionManager, state: Any) -> None:
        self._manager = manager
        self._state = state
        self._handlers: dict[str, tuple[Handler, str]] = {
            "join_meeting": (self.join_meeting, "Failed to join meeting"),
            "leave_meeting": (self.leave_meeting, "Failed to leave meeting"),
            "transcription_update": (
                self.transcription_update,
                "Failed to process transcription",
            ),
            "agent_control": (self.agent_control, "Failed to control agent"),
            "meeting_status_change": (
                self.meeting_status_change,
                "Failed to update meeting status",
            ),
        }

    def _component(self, name: str) -> Any:
        component = getattr(self._state, name, None)
        if component is None:
            raise EventError(f"{name} not initialized")
        return component

    async def dispatch(self, session: SocketSession, event: str, data: Any) -> None:
        entry = self._handlers.get(event)
        if entry is None:
            websocket_events_total.labels(event="unknown", outcome="rejected").inc()
            await self._manager.send(
                session.websocket, "error", {"message": f"Unknown event: {event}"}
            )
            return

        handler, failure_message = entry
        try:
            if not isinstance(data, dict):
                raise EventError(f"Invalid payload for {event}")
            await handler(session, data)
        except ValidationError as e:
            websocket_events_total.labels(event=event, outcome="invalid").inc()
            await self._manager.send(
                session.websocket,
                "error",
                {
                    "message": f"Invalid payload for {event}",
                    "details": jsonable_encoder(e.errors(include_url=False)),
                },
            )
        except EventError as e:
            websocket_events_total.labels(event=event, outcome="error").inc()
            await self._manager.send(session.websocket, "error", {"message": e.message})
        except Exception:
            websocket_events_total.labels(event=event, outcome="error").inc()
            logger.warning(
                "realtime.handler_error",
                socket_event=event,
                user_id=str(session.user.id),
                exc_info=True,
            )
            await self._manager.send(session.websocket, "error", {"message": failure_message})
        else:
            websocket_events_total.labels(event=event, outcome="ok").inc()

    async def _owned_meeting(self, session: SocketSession, meeting_id: uuid.UUID):
        meeting = await self._component("meeting_repository").get_meeting(
            session.user.id, meeting_id
        )
        if meeting is None:
            raise EventError("Meeting not found")
        return meeting

    # ── Handlers ─────────────────────────────────────────────────────────

    async def join_meeting(self, session: SocketSession, data: dict[str, Any]) -> None:
        payload = MeetingRef.model_validate(data)
        await self._owned_meeting(session, payload.meeting_id)
        room = meeting_room(payload.meeting_id)
        self._manager.join(session.websocket, room)
        await self._manager.broadcast(
            room,
            "meeting_participant_joined",
            {
                "meeting_id": str(payload.meeting_id),
                "user": _user_payload(session.user),
                "timestamp": _now(),
            },
        )
        logger.info(
            "realtime.meeting_joined",
            meeting_id=str(payload.meeting_id),
            user_id=str(session.user.id),
        )

    async def leave_meeting(self, session: SocketSession, data: dict[str, Any]) -> None:
        payload = MeetingRef.model_validate(data)
        room = meeting_room(payload.meeting_id)
        self._manager.leave(session.websocket, room)
        await self._manager.broadcast(
            room,
            "meeting_participant_left",
            {
                "meeting_id": str(payload.meeting_id),
                "user": _user_payload(session.user),
                "timestamp": _now(),
            },
        )

    async def transcription_update(self, session: SocketSession, data: dict[str, Any]) -> None:
        payload = TranscriptionUpdate.model_validate(data)
        await self._owned_meeting(session, payload.meeting_id)

        result = await self._component("transcriber").transcribe(
            payload.meeting_id, payload.audio_chunk
        )
        transcript = await self._component("meeting_repository").add_transcript(
            payload.meeting_id,
            content=result.content,
            timestamp=result.timestamp,
            speaker=result.speaker,
        )
        await self._manager.broadcast(
            meeting_room(payload.meeting_id),
            "live_transcript_update",
            {
                "meeting_id": str(payload.meeting_id),
                "transcript_chunk": transcript.model_dump(mode="json"),
                "current_speaker": result.speaker,
                "confidence": result.confidence,
            },
        )

    async def agent_control(self, session: SocketSession, data: dict[str, Any]) -> None:
        payload = AgentControl.model_validate(data)
        meeting = await self._component("meeting_repository").get_meeting(
            session.user.id, payload.meeting_id
        )
        agents = self._component("agent_repository")
        agent = await agents.get_agent(session.user.id, payload.agent_id)
        if meeting is None or agent is None:
            raise EventError("Meeting or agent not found")

        room = meeting_room(payload.meeting_id)
        if payload.action == "toggle_participation":
            try:
                level = ParticipationLevel(payload.params.get("participation_level"))
            except ValueError:
                raise EventError("Invalid participation_level")
            updated = await agents.update_agent(
                session.user.id, payload.agent_id, {"participation_level": level}
            )
            if updated is None:
                raise EventError("Meeting or agent not found")
            await self._manager.broadcast(
                room,
                "agent_participation_changed",
                {
                    "meeting_id": str(payload.meeting_id),
                    "agent_id": str(payload.agent_id),
                    "participation_level": level.value,
                },
            )
        elif payload.action == "generate_response":
            reply = await self._component("agent_responder").respond(
                payload.agent_id,
                meeting_context=payload.params.get("context"),
                trigger_type=payload.params.get("trigger") or "manual",
            )
            await self._manager.broadcast(
                room,
                "agent_response",
                {
                    "meeting_id": str(payload.meeting_id),
                    "agent_id": str(payload.agent_id),
                    "response": reply.response_text,
                    "confidence": reply.confidence,
                    "response_type": reply.response_type,
                    "timestamp": reply.timestamp.isoformat(),
                },
            )
        else:
            raise EventError(f"Unknown agent action: {payload.action}")

        logger.info(
            "realtime.agent_control",
            action=payload.action,
            agent_id=str(payload.agent_id),
            meeting_id=str(payload.meeting_id),
        )

    async def meeting_status_change(self, session: SocketSession, data: dict[str, Any]) -> None:
        """Update a meeting's status; completing it produces a summary."""
        payload = StatusChange.model_validate(data)
        meetings = self._component("meeting_repository")
        current = await self._owned_meeting(session, payload.meeting_id)

        updated = await meetings.update_meeting(
            session.user.id, payload.meeting_id, {"status": payload.new_status}
        )
        if updated is None:
            raise EventError("Meeting not found")

        if payload.new_status == MeetingStatus.COMPLETED:
            transcripts, _ = await meetings.list_transcripts(
                payload.meeting_id, TranscriptFilter(limit=TRANSCRIPT_FETCH_LIMIT)
            )
            participants, _ = await meetings.list_participants(
                payload.meeting_id, limit=PARTICIPANT_FETCH_LIMIT
            )
            draft = await self._component("summarizer").summarize(
                payload.meeting_id, transcripts, participants
            )
            summary = await meetings.save_generated_summary(payload.meeting_id, draft)
            await self._manager.broadcast(
                user_room(session.user.id),
                "meeting_summary_generated",
                {
                    "meeting_id": str(payload.meeting_id),
                    "summary": summary.model_dump(mode="json"),
                    "processing_time": draft.processing_time,
                },
            )

        await self._manager.broadcast(
            meeting_room(payload.meeting_id),
            "meeting_status_changed",
            {
                "meeting_id": str(payload.meeting_id),
                "previous_status": current.status.value,
                "new_status": payload.new_status.value,
                "meeting": updated.model_dump(mode="json"),
            },
        )
        logger.info(
            "meeting.status_changed",
            meeting_id=str(payload.meeting_id),
            previous_status=current.status.value,
            new_status=payload.new_status.value,
        )
