"""REST endpoints for meetings and their child resources.

Covers meeting search and CRUD, agent assignment, participants, the
summary, transcripts, and the recording. Every child endpoint first
loads the meeting for the current user so foreign meetings surface as
MEETING_NOT_FOUND.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, Request, Response, status

from src.meetassist.api.deps import get_current_user, get_state
from src.meetassist.core.errors import ApiError, no_updates, not_found
from src.meetassist.meetings.schemas import (
    AssignAgentRequest,
    Meeting,
    MeetingAgent,
    MeetingCreate,
    MeetingFilter,
    MeetingList,
    MeetingSortField,
    MeetingStatus,
    MeetingUpdate,
    Participant,
    ParticipantCreate,
    ParticipantList,
    Recording,
    RecordingUpdate,
    Summary,
    SummaryUpdate,
    TranscriptFilter,
    TranscriptList,
    TranscriptSortField,
)
from src.meetassist.schemas.common import SortOrder, UtcDatetime
from src.meetassist.users.schemas import User

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/meetings", tags=["meetings"])


# ── Dependency Injection Helpers ─────────────────────────────────────────────


def _get_meeting_repository(request: Request) -> Any:
    return get_state(request, "meeting_repository", "Meeting repository")


def _get_agent_repository(request: Request) -> Any:
    return get_state(request, "agent_repository", "Agent repository")


def _meeting_not_found():
    return not_found("Meeting not found", "MEETING_NOT_FOUND")


async def _owned_meeting(request: Request, user: User, meeting_id: uuid.UUID) -> Meeting:
    meeting = await _get_meeting_repository(request).get_meeting(user.id, meeting_id)
    if meeting is None:
        raise _meeting_not_found()
    return meeting


def meeting_filter(
    meeting_type: str | None = None,
    status_: MeetingStatus | None = Query(None, alias="status"),
    start_date: UtcDatetime | None = None,
    end_date: UtcDatetime | None = None,
    agent_id: uuid.UUID | None = None,
    limit: int = Query(20, gt=0, le=500),
    offset: int = Query(0, ge=0),
    sort_by: MeetingSortField = MeetingSortField.START_TIME,
    sort_order: SortOrder = SortOrder.ASC,
) -> MeetingFilter:
    return MeetingFilter(
        meeting_type=meeting_type,
        status=status_,
        start_date=start_date,
        end_date=end_date,
        agent_id=agent_id,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )


def transcript_filter(
    speaker: str | None = None,
    start_time: UtcDatetime | None = None,
    end_time: UtcDatetime | None = None,
    limit: int = Query(100, gt=0, le=1000),
    offset: int = Query(0, ge=0),
    sort_by: TranscriptSortField = TranscriptSortField.TIMESTAMP,
    sort_order: SortOrder = SortOrder.ASC,
) -> TranscriptFilter:
    return TranscriptFilter(
        speaker=speaker,
        start_time=start_time,
        end_time=end_time,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )


# ── Meetings ─────────────────────────────────────────────────────────────────


@router.get("", response_model=MeetingList)
async def list_meetings(
    request: Request,
    filters: MeetingFilter = Depends(meeting_filter),
    user: User = Depends(get_current_user),
):
    meetings, total = await _get_meeting_repository(request).list_meetings(user.id, filters)
    return MeetingList(meetings=meetings, total_count=total)


@router.post("", response_model=Meeting, status_code=status.HTTP_201_CREATED)
async def create_meeting(
    body: MeetingCreate,
    request: Request,
    user: User = Depends(get_current_user),
):
    return await _get_meeting_repository(request).create_meeting(user.id, body)


@router.get("/{meeting_id}", response_model=Meeting)
async def get_meeting(
    meeting_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    return await _owned_meeting(request, user, meeting_id)


@router.put("/{meeting_id}", response_model=Meeting)
async def update_meeting(
    meeting_id: uuid.UUID,
    body: MeetingUpdate,
    request: Request,
    user: User = Depends(get_current_user),
):
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise no_updates()
    current = await _owned_meeting(request, user, meeting_id)
    start = changes.get("start_time", current.start_time)
    end = changes.get("end_time", current.end_time)
    if end < start:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "end_time must not be before start_time",
            "VALIDATION_ERROR",
        )
    meeting = await _get_meeting_repository(request).update_meeting(
        user.id, meeting_id, changes
    )
    if meeting is None:
        raise _meeting_not_found()
    if meeting.status != current.status:
        logger.info(
            "meeting.status_changed",
            meeting_id=str(meeting_id),
            previous_status=current.status.value,
            new_status=meeting.status.value,
        )
    return meeting


@router.delete("/{meeting_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_meeting(
    meeting_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    if not await _get_meeting_repository(request).delete_meeting(user.id, meeting_id):
        raise _meeting_not_found()
    logger.info("meeting.deleted", meeting_id=str(meeting_id), user_id=str(user.id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Agent Assignment ─────────────────────────────────────────────────────────


@router.post(
    "/{meeting_id}/assign-agent",
    response_model=MeetingAgent,
    status_code=status.HTTP_201_CREATED,
)
async def assign_agent(
    meeting_id: uuid.UUID,
    body: AssignAgentRequest,
    request: Request,
    user: User = Depends(get_current_user),
):
    """Attach one of the user's agents to one of the user's meetings."""
    if body.agent_id is None:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Agent ID is required", "MISSING_AGENT_ID")
    await _owned_meeting(request, user, meeting_id)

    agent_repo = _get_agent_repository(request)
    agent = await agent_repo.get_agent(user.id, body.agent_id)
    if agent is None:
        raise not_found("Agent not found", "AGENT_NOT_FOUND")

    meeting_repo = _get_meeting_repository(request)
    if await meeting_repo.get_assignment(meeting_id, body.agent_id) is not None:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "Agent is already assigned to this meeting",
            "AGENT_ALREADY_ASSIGNED",
        )
    assignment = await meeting_repo.assign_agent(meeting_id, body.agent_id)
    await agent_repo.touch_last_used(user.id, body.agent_id, datetime.now(timezone.utc))
    logger.info("meeting.agent_assigned", meeting_id=str(meeting_id), agent_id=str(body.agent_id))
    return assignment


# ── Participants ─────────────────────────────────────────────────────────────


@router.get("/{meeting_id}/participants", response_model=ParticipantList)
async def list_participants(
    meeting_id: uuid.UUID,
    request: Request,
    email: str | None = None,
    limit: int = Query(50, gt=0, le=500),
    user: User = Depends(get_current_user),
):
    await _owned_meeting(request, user, meeting_id)
    participants, total = await _get_meeting_repository(request).list_participants(
        meeting_id, email=email, limit=limit
    )
    return ParticipantList(participants=participants, total_count=total)


@router.post(
    "/{meeting_id}/participants",
    response_model=Participant,
    status_code=status.HTTP_201_CREATED,
)
async def add_participant(
    meeting_id: uuid.UUID,
    body: ParticipantCreate,
    request: Request,
    user: User = Depends(get_current_user),
):
    await _owned_meeting(request, user, meeting_id)
    return await _get_meeting_repository(request).add_participant(meeting_id, body)


# ── Summary ──────────────────────────────────────────────────────────────────


def _summary_not_found():
    return not_found("Meeting summary not found", "SUMMARY_NOT_FOUND")


@router.get("/{meeting_id}/summary", response_model=Summary)
async def get_summary(
    meeting_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    await _owned_meeting(request, user, meeting_id)
    summary = await _get_meeting_repository(request).get_summary(meeting_id)
    if summary is None:
        raise _summary_not_found()
    return summary


@router.put("/{meeting_id}/summary", response_model=Summary)
async def update_summary(
    meeting_id: uuid.UUID,
    body: SummaryUpdate,
    request: Request,
    user: User = Depends(get_current_user),
):
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise no_updates()
    await _owned_meeting(request, user, meeting_id)
    summary = await _get_meeting_repository(request).update_summary(meeting_id, changes)
    if summary is None:
        raise _summary_not_found()
    return summary


# ── Transcripts ──────────────────────────────────────────────────────────────


@router.get("/{meeting_id}/transcripts", response_model=TranscriptList)
async def list_transcripts(
    meeting_id: uuid.UUID,
    request: Request,
    filters: TranscriptFilter = Depends(transcript_filter),
    user: User = Depends(get_current_user),
):
    await _owned_meeting(request, user, meeting_id)
    transcripts, total = await _get_meeting_repository(request).list_transcripts(
        meeting_id, filters
    )
    return TranscriptList(transcripts=transcripts, total_count=total)


# ── Recording ────────────────────────────────────────────────────────────────


@router.get("/{meeting_id}/recording", response_model=Recording)
async def get_recording(
    meeting_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    await _owned_meeting(request, user, meeting_id)
    recording = await _get_meeting_repository(request).get_recording(meeting_id)
    if recording is None:
        raise not_found("Meeting recording not found", "RECORDING_NOT_FOUND")
    return recording


@router.put("/{meeting_id}/recording", response_model=Recording)
async def save_recording(
    meeting_id: uuid.UUID,
    body: RecordingUpdate,
    request: Request,
    user: User = Depends(get_current_user),
):
    """Update the recording, creating it on the first write."""
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise no_updates()
    await _owned_meeting(request, user, meeting_id)
    return await _get_meeting_repository(request).save_recording(meeting_id, changes)
