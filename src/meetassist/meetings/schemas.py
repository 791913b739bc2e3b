"""Pydantic v2 schemas for the meetings domain.

Defines the data contracts for meetings, agent assignments, participants,
transcripts, summaries, and recordings. The realtime layer and the
analytics dashboard import from this module as well.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from src.meetassist.schemas.common import ListParams, SortOrder, UtcDatetime


# ── Enums ────────────────────────────────────────────────────────────────────


class MeetingStatus(str, Enum):
    """Lifecycle status of a meeting."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


class JoinStatus(str, Enum):
    """Whether an assigned agent has joined the meeting."""

    PENDING = "pending"
    JOINED = "joined"
    DECLINED = "declined"
    LEFT = "left"


class MeetingSortField(str, Enum):
    START_TIME = "start_time"
    CREATED_AT = "created_at"
    TITLE = "title"


class TranscriptSortField(str, Enum):
    TIMESTAMP = "timestamp"
    CREATED_AT = "created_at"


# ── Meetings ─────────────────────────────────────────────────────────────────


class Meeting(BaseModel):
    """Full meeting entity."""

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    calendar_event_id: str | None = None
    meeting_type: str
    agenda: str | None = None
    desired_outcomes: str | None = None
    special_instructions: str | None = None
    status: MeetingStatus = MeetingStatus.SCHEDULED
    created_at: datetime
    updated_at: datetime


class MeetingCreate(BaseModel):
    """Request schema for creating a meeting."""

    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    start_time: UtcDatetime
    end_time: UtcDatetime
    calendar_event_id: str | None = Field(None, max_length=255)
    meeting_type: str = Field(min_length=1, max_length=255)
    agenda: str | None = None
    desired_outcomes: str | None = None
    special_instructions: str | None = None
    status: MeetingStatus = MeetingStatus.SCHEDULED

    @model_validator(mode="after")
    def _end_after_start(self) -> MeetingCreate:
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class MeetingUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    start_time: UtcDatetime | None = None
    end_time: UtcDatetime | None = None
    calendar_event_id: str | None = Field(None, max_length=255)
    meeting_type: str | None = Field(None, min_length=1, max_length=255)
    agenda: str | None = None
    desired_outcomes: str | None = None
    special_instructions: str | None = None
    status: MeetingStatus | None = None


class MeetingFilter(ListParams):
    meeting_type: str | None = None
    status: MeetingStatus | None = None
    start_date: UtcDatetime | None = Field(None, description="Meetings starting at or after")
    end_date: UtcDatetime | None = Field(None, description="Meetings ending at or before")
    agent_id: uuid.UUID | None = Field(None, description="Meetings this agent is assigned to")
    sort_by: MeetingSortField = MeetingSortField.START_TIME
    sort_order: SortOrder = SortOrder.ASC


class MeetingList(BaseModel):
    meetings: list[Meeting]
    total_count: int


# ── Agent Assignment ─────────────────────────────────────────────────────────


class AssignAgentRequest(BaseModel):
    agent_id: uuid.UUID | None = None


class MeetingAgent(BaseModel):
    id: uuid.UUID
    meeting_id: uuid.UUID
    agent_id: uuid.UUID
    join_status: JoinStatus = JoinStatus.PENDING
    joined_at: datetime | None = None
    left_at: datetime | None = None


# ── Participants ─────────────────────────────────────────────────────────────


class Participant(BaseModel):
    id: uuid.UUID
    meeting_id: uuid.UUID
    name: str
    email: str | None = None
    role: str | None = None
    created_at: datetime


class ParticipantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255)
    role: str | None = Field(None, max_length=255)


class ParticipantList(BaseModel):
    participants: list[Participant]
    total_count: int


# ── Summary ──────────────────────────────────────────────────────────────────


class SummaryDraft(BaseModel):
    """Generated summary content before it is stored."""

    key_discussion_points: str
    decisions_made: str | None = None
    sentiment_analysis: str | None = None
    participant_engagement: str | None = None
    generated_summary: str
    processing_time: float = 0.0


class Summary(BaseModel):
    id: uuid.UUID
    meeting_id: uuid.UUID
    key_discussion_points: str
    decisions_made: str | None = None
    sentiment_analysis: str | None = None
    participant_engagement: str | None = None
    generated_summary: str
    edited_summary: str | None = None
    generated_at: datetime
    edited_at: datetime | None = None
    is_finalized: bool = False
    created_at: datetime
    updated_at: datetime


class SummaryUpdate(BaseModel):
    key_discussion_points: str | None = None
    decisions_made: str | None = None
    sentiment_analysis: str | None = None
    participant_engagement: str | None = None
    edited_summary: str | None = None
    is_finalized: bool | None = None


# ── Transcripts ──────────────────────────────────────────────────────────────


class Transcript(BaseModel):
    id: uuid.UUID
    meeting_id: uuid.UUID
    speaker: str | None = None
    content: str
    timestamp: datetime
    created_at: datetime


class TranscriptFilter(ListParams):
    speaker: str | None = None
    start_time: UtcDatetime | None = None
    end_time: UtcDatetime | None = None
    limit: int = Field(100, gt=0, le=1000)
    sort_by: TranscriptSortField = TranscriptSortField.TIMESTAMP
    sort_order: SortOrder = SortOrder.ASC


class TranscriptList(BaseModel):
    transcripts: list[Transcript]
    total_count: int


# ── Recording ────────────────────────────────────────────────────────────────


class Recording(BaseModel):
    id: uuid.UUID
    meeting_id: uuid.UUID
    recording_url: str | None = None
    storage_duration: int = 30
    file_size: int | None = None
    created_at: datetime


class RecordingUpdate(BaseModel):
    recording_url: str | None = Field(None, max_length=500)
    storage_duration: int | None = Field(None, gt=0)
    file_size: int | None = Field(None, ge=0)
