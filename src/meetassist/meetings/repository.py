"""Meeting repository -- async CRUD for all meeting entities.

Provides MeetingRepository with the session_factory callable pattern.
Meeting-level methods take the owning user_id and filter on it. Child
entity methods (participants, transcripts, summary, recording, agent
assignments) take only meeting_id: callers resolve the meeting through
get_meeting() first, which is where ownership is enforced.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.meetassist.core.query import apply_paging, count_rows
from src.meetassist.meetings.models import (
    MeetingAgentModel,
    MeetingModel,
    MeetingParticipantModel,
    MeetingRecordingModel,
    MeetingSummaryModel,
    MeetingTranscriptModel,
)
from src.meetassist.meetings.schemas import (
    JoinStatus,
    Meeting,
    MeetingAgent,
    MeetingCreate,
    MeetingFilter,
    MeetingStatus,
    Participant,
    ParticipantCreate,
    Recording,
    Summary,
    SummaryDraft,
    Transcript,
    TranscriptFilter,
)

logger = structlog.get_logger(__name__)


# ── Serialization Helpers ───────────────────────────────────────────────────


def _model_to_meeting(model: MeetingModel) -> Meeting:
    """Convert MeetingModel to Meeting schema."""
    return Meeting(
        id=model.id,
        user_id=model.user_id,
        title=model.title,
        description=model.description,
        start_time=model.start_time,
        end_time=model.end_time,
        calendar_event_id=model.calendar_event_id,
        meeting_type=model.meeting_type,
        agenda=model.agenda,
        desired_outcomes=model.desired_outcomes,
        special_instructions=model.special_instructions,
        status=MeetingStatus(model.status),
        created_at=model.created_at,
        updated_at=model.updated_at or model.created_at,
    )


def _model_to_meeting_agent(model: MeetingAgentModel) -> MeetingAgent:
    return MeetingAgent(
        id=model.id,
        meeting_id=model.meeting_id,
        agent_id=model.agent_id,
        join_status=JoinStatus(model.join_status),
        joined_at=model.joined_at,
        left_at=model.left_at,
    )


def _model_to_participant(model: MeetingParticipantModel) -> Participant:
    return Participant(
        id=model.id,
        meeting_id=model.meeting_id,
        name=model.name,
        email=model.email,
        role=model.role,
        created_at=model.created_at,
    )


def _model_to_summary(model: MeetingSummaryModel) -> Summary:
    return Summary(
        id=model.id,
        meeting_id=model.meeting_id,
        key_discussion_points=model.key_discussion_points,
        decisions_made=model.decisions_made,
        sentiment_analysis=model.sentiment_analysis,
        participant_engagement=model.participant_engagement,
        generated_summary=model.generated_summary,
        edited_summary=model.edited_summary,
        generated_at=model.generated_at,
        edited_at=model.edited_at,
        is_finalized=model.is_finalized,
        created_at=model.created_at,
        updated_at=model.updated_at or model.created_at,
    )


def _model_to_transcript(model: MeetingTranscriptModel) -> Transcript:
    return Transcript(
        id=model.id,
        meeting_id=model.meeting_id,
        speaker=model.speaker,
        content=model.content,
        timestamp=model.timestamp,
        created_at=model.created_at,
    )


def _model_to_recording(model: MeetingRecordingModel) -> Recording:
    return Recording(
        id=model.id,
        meeting_id=model.meeting_id,
        recording_url=model.recording_url,
        storage_duration=model.storage_duration,
        file_size=model.file_size,
        created_at=model.created_at,
    )


def _enum_values(changes: dict[str, Any]) -> dict[str, Any]:
    return {k: getattr(v, "value", v) for k, v in changes.items()}


_MEETING_SORT_COLUMNS = {
    "start_time": MeetingModel.start_time,
    "created_at": MeetingModel.created_at,
    "title": MeetingModel.title,
}

_TRANSCRIPT_SORT_COLUMNS = {
    "timestamp": MeetingTranscriptModel.timestamp,
    "created_at": MeetingTranscriptModel.created_at,
}


# ── Repository ──────────────────────────────────────────────────────────────


class MeetingRepository:
    """Async CRUD operations for all meeting entities.

    Args:
        session_factory: Async callable that yields AsyncSession instances.
    """

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    async def _get_owned(
        self, session: AsyncSession, user_id: uuid.UUID, meeting_id: uuid.UUID
    ) -> MeetingModel | None:
        result = await session.execute(
            select(MeetingModel).where(
                MeetingModel.id == meeting_id, MeetingModel.user_id == user_id
            )
        )
        return result.scalar_one_or_none()

    # ── Meetings ─────────────────────────────────────────────────────────

    async def list_meetings(
        self, user_id: uuid.UUID, filters: MeetingFilter
    ) -> tuple[list[Meeting], int]:
        """Search the user's meetings.

        Returns:
            Tuple of (page of meetings, total matching count).
        """
        async for session in self._session_factory():
            stmt = select(MeetingModel).where(MeetingModel.user_id == user_id)
            if filters.meeting_type:
                stmt = stmt.where(MeetingModel.meeting_type == filters.meeting_type)
            if filters.status:
                stmt = stmt.where(MeetingModel.status == filters.status.value)
            if filters.start_date:
                stmt = stmt.where(MeetingModel.start_time >= filters.start_date)
            if filters.end_date:
                stmt = stmt.where(MeetingModel.end_time <= filters.end_date)
            if filters.agent_id:
                stmt = stmt.where(
                    MeetingModel.id.in_(
                        select(MeetingAgentModel.meeting_id).where(
                            MeetingAgentModel.agent_id == filters.agent_id
                        )
                    )
                )
            total = await count_rows(session, stmt)
            stmt = apply_paging(
                stmt,
                _MEETING_SORT_COLUMNS[filters.sort_by.value],
                filters.sort_order,
                filters.limit,
                filters.offset,
                tiebreak=MeetingModel.id,
            )
            result = await session.execute(stmt)
            return [_model_to_meeting(m) for m in result.scalars().all()], total

    async def create_meeting(self, user_id: uuid.UUID, data: MeetingCreate) -> Meeting:
        async for session in self._session_factory():
            model = MeetingModel(user_id=user_id, **_enum_values(data.model_dump()))
            session.add(model)
            await session.commit()
            await session.refresh(model)
            logger.info("meeting.created", meeting_id=str(model.id), user_id=str(user_id))
            return _model_to_meeting(model)

    async def get_meeting(
        self, user_id: uuid.UUID, meeting_id: uuid.UUID
    ) -> Meeting | None:
        """Get a meeting by ID, only if user_id owns it."""
        async for session in self._session_factory():
            model = await self._get_owned(session, user_id, meeting_id)
            return _model_to_meeting(model) if model else None

    async def update_meeting(
        self, user_id: uuid.UUID, meeting_id: uuid.UUID, changes: dict[str, Any]
    ) -> Meeting | None:
        async for session in self._session_factory():
            model = await self._get_owned(session, user_id, meeting_id)
            if model is None:
                return None
            for field, value in _enum_values(changes).items():
                setattr(model, field, value)
            await session.commit()
            await session.refresh(model)
            return _model_to_meeting(model)

    async def delete_meeting(self, user_id: uuid.UUID, meeting_id: uuid.UUID) -> bool:
        async for session in self._session_factory():
            model = await self._get_owned(session, user_id, meeting_id)
            if model is None:
                return False
            await session.delete(model)
            await session.commit()
            return True

    # ── Agent Assignment ─────────────────────────────────────────────────

    async def get_assignment(
        self, meeting_id: uuid.UUID, agent_id: uuid.UUID
    ) -> MeetingAgent | None:
        async for session in self._session_factory():
            result = await session.execute(
                select(MeetingAgentModel).where(
                    MeetingAgentModel.meeting_id == meeting_id,
                    MeetingAgentModel.agent_id == agent_id,
                )
            )
            model = result.scalar_one_or_none()
            return _model_to_meeting_agent(model) if model else None

    async def assign_agent(
        self, meeting_id: uuid.UUID, agent_id: uuid.UUID
    ) -> MeetingAgent:
        """Attach an agent to a meeting with join_status pending."""
        async for session in self._session_factory():
            model = MeetingAgentModel(
                meeting_id=meeting_id,
                agent_id=agent_id,
                join_status=JoinStatus.PENDING.value,
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            return _model_to_meeting_agent(model)

    # ── Participants ─────────────────────────────────────────────────────

    async def list_participants(
        self, meeting_id: uuid.UUID, email: str | None = None, limit: int = 50
    ) -> tuple[list[Participant], int]:
        async for session in self._session_factory():
            stmt = select(MeetingParticipantModel).where(
                MeetingParticipantModel.meeting_id == meeting_id
            )
            if email:
                stmt = stmt.where(MeetingParticipantModel.email == email)
            total = await count_rows(session, stmt)
            stmt = stmt.order_by(MeetingParticipantModel.created_at).limit(limit)
            result = await session.execute(stmt)
            return [_model_to_participant(m) for m in result.scalars().all()], total

    async def add_participant(
        self, meeting_id: uuid.UUID, data: ParticipantCreate
    ) -> Participant:
        async for session in self._session_factory():
            model = MeetingParticipantModel(meeting_id=meeting_id, **data.model_dump())
            session.add(model)
            await session.commit()
            await session.refresh(model)
            return _model_to_participant(model)

    # ── Summary ──────────────────────────────────────────────────────────

    async def get_summary(self, meeting_id: uuid.UUID) -> Summary | None:
        async for session in self._session_factory():
            result = await session.execute(
                select(MeetingSummaryModel).where(
                    MeetingSummaryModel.meeting_id == meeting_id
                )
            )
            model = result.scalar_one_or_none()
            return _model_to_summary(model) if model else None

    async def update_summary(
        self, meeting_id: uuid.UUID, changes: dict[str, Any]
    ) -> Summary | None:
        """Apply edits to an existing summary.

        Setting edited_summary also stamps edited_at.
        """
        async for session in self._session_factory():
            result = await session.execute(
                select(MeetingSummaryModel).where(
                    MeetingSummaryModel.meeting_id == meeting_id
                )
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None
            for field, value in changes.items():
                setattr(model, field, value)
            if "edited_summary" in changes:
                model.edited_at = datetime.now(timezone.utc)
            await session.commit()
            await session.refresh(model)
            return _model_to_summary(model)

    async def save_generated_summary(
        self, meeting_id: uuid.UUID, draft: SummaryDraft
    ) -> Summary:
        """Store a freshly generated summary, replacing any earlier one.

        Regeneration clears manual edits and the finalized flag.
        """
        async for session in self._session_factory():
            result = await session.execute(
                select(MeetingSummaryModel).where(
                    MeetingSummaryModel.meeting_id == meeting_id
                )
            )
            model = result.scalar_one_or_none()
            if model is None:
                model = MeetingSummaryModel(meeting_id=meeting_id)
                session.add(model)
            model.key_discussion_points = draft.key_discussion_points
            model.decisions_made = draft.decisions_made
            model.sentiment_analysis = draft.sentiment_analysis
            model.participant_engagement = draft.participant_engagement
            model.generated_summary = draft.generated_summary
            model.generated_at = datetime.now(timezone.utc)
            model.edited_summary = None
            model.edited_at = None
            model.is_finalized = False
            await session.commit()
            await session.refresh(model)
            logger.info("meeting.summary_saved", meeting_id=str(meeting_id))
            return _model_to_summary(model)

    # ── Transcripts ──────────────────────────────────────────────────────

    async def list_transcripts(
        self, meeting_id: uuid.UUID, filters: TranscriptFilter
    ) -> tuple[list[Transcript], int]:
        async for session in self._session_factory():
            stmt = select(MeetingTranscriptModel).where(
                MeetingTranscriptModel.meeting_id == meeting_id
            )
            if filters.speaker:
                stmt = stmt.where(MeetingTranscriptModel.speaker == filters.speaker)
            if filters.start_time:
                stmt = stmt.where(MeetingTranscriptModel.timestamp >= filters.start_time)
            if filters.end_time:
                stmt = stmt.where(MeetingTranscriptModel.timestamp <= filters.end_time)
            total = await count_rows(session, stmt)
            stmt = apply_paging(
                stmt,
                _TRANSCRIPT_SORT_COLUMNS[filters.sort_by.value],
                filters.sort_order,
                filters.limit,
                filters.offset,
                tiebreak=MeetingTranscriptModel.id,
            )
            result = await session.execute(stmt)
            return [_model_to_transcript(m) for m in result.scalars().all()], total

    async def add_transcript(
        self,
        meeting_id: uuid.UUID,
        content: str,
        timestamp: datetime,
        speaker: str | None = None,
    ) -> Transcript:
        async for session in self._session_factory():
            model = MeetingTranscriptModel(
                meeting_id=meeting_id,
                speaker=speaker,
                content=content,
                timestamp=timestamp,
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            return _model_to_transcript(model)

    # ── Recording ────────────────────────────────────────────────────────

    async def get_recording(self, meeting_id: uuid.UUID) -> Recording | None:
        async for session in self._session_factory():
            result = await session.execute(
                select(MeetingRecordingModel).where(
                    MeetingRecordingModel.meeting_id == meeting_id
                )
            )
            model = result.scalar_one_or_none()
            return _model_to_recording(model) if model else None

    async def save_recording(
        self, meeting_id: uuid.UUID, changes: dict[str, Any]
    ) -> Recording:
        """Update the meeting's recording row, creating it on first write."""
        async for session in self._session_factory():
            result = await session.execute(
                select(MeetingRecordingModel).where(
                    MeetingRecordingModel.meeting_id == meeting_id
                )
            )
            model = result.scalar_one_or_none()
            if model is None:
                model = MeetingRecordingModel(meeting_id=meeting_id)
                session.add(model)
            for field, value in changes.items():
                setattr(model, field, value)
            await session.commit()
            await session.refresh(model)
            return _model_to_recording(model)
