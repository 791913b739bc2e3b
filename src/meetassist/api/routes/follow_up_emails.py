"""Follow-up email endpoints, including the mock send."""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, Request, Response, status

from src.meetassist.api.deps import get_current_user, get_state
from src.meetassist.core.errors import ApiError, no_updates, not_found
from src.meetassist.follow_ups.schemas import (
    EmailSortField,
    EmailStatus,
    FollowUpEmail,
    FollowUpEmailCreate,
    FollowUpEmailFilter,
    FollowUpEmailList,
    FollowUpEmailUpdate,
)
from src.meetassist.schemas.common import SortOrder, UtcDatetime
from src.meetassist.users.schemas import User

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/follow-up-emails", tags=["follow-up-emails"])


def _get_email_repository(request: Request) -> Any:
    return get_state(request, "follow_up_email_repository", "Follow-up email repository")


def _email_not_found():
    return not_found("Follow-up email not found", "EMAIL_NOT_FOUND")


def email_filter(
    meeting_id: uuid.UUID | None = None,
    status_: EmailStatus | None = Query(None, alias="status"),
    scheduled_before: UtcDatetime | None = None,
    scheduled_after: UtcDatetime | None = None,
    limit: int = Query(20, gt=0, le=500),
    offset: int = Query(0, ge=0),
    sort_by: EmailSortField = EmailSortField.SCHEDULED_SEND_TIME,
    sort_order: SortOrder = SortOrder.ASC,
) -> FollowUpEmailFilter:
    return FollowUpEmailFilter(
        meeting_id=meeting_id,
        status=status_,
        scheduled_before=scheduled_before,
        scheduled_after=scheduled_after,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("", response_model=FollowUpEmailList)
async def list_follow_up_emails(
    request: Request,
    filters: FollowUpEmailFilter = Depends(email_filter),
    user: User = Depends(get_current_user),
):
    emails, total = await _get_email_repository(request).list_emails(user.id, filters)
    return FollowUpEmailList(follow_up_emails=emails, total_count=total)


@router.post("", response_model=FollowUpEmail, status_code=status.HTTP_201_CREATED)
async def create_follow_up_email(
    body: FollowUpEmailCreate,
    request: Request,
    user: User = Depends(get_current_user),
):
    meetings = get_state(request, "meeting_repository", "Meeting repository")
    if await meetings.get_meeting(user.id, body.meeting_id) is None:
        raise not_found("Meeting not found", "MEETING_NOT_FOUND")
    return await _get_email_repository(request).create_email(body)


@router.get("/{email_id}", response_model=FollowUpEmail)
async def get_follow_up_email(
    email_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    email = await _get_email_repository(request).get_email(user.id, email_id)
    if email is None:
        raise _email_not_found()
    return email


@router.put("/{email_id}", response_model=FollowUpEmail)
async def update_follow_up_email(
    email_id: uuid.UUID,
    body: FollowUpEmailUpdate,
    request: Request,
    user: User = Depends(get_current_user),
):
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise no_updates()
    email = await _get_email_repository(request).update_email(user.id, email_id, changes)
    if email is None:
        raise _email_not_found()
    return email


@router.delete("/{email_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_follow_up_email(
    email_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    if not await _get_email_repository(request).delete_email(user.id, email_id):
        raise _email_not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{email_id}/send", response_model=FollowUpEmail)
async def send_follow_up_email(
    email_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    """Hand the email to the mail transport and record it as sent.

    Raises:
        ApiError(404): Email does not exist or belongs to another user.
        ApiError(400): Email was already sent.
    """
    repo = _get_email_repository(request)
    email = await repo.get_email(user.id, email_id)
    if email is None:
        raise _email_not_found()
    if email.status == EmailStatus.SENT:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST, "Email has already been sent", "EMAIL_ALREADY_SENT"
        )

    sender = get_state(request, "email_sender", "Email sender")
    receipt = await sender.send(email)
    sent = await repo.mark_sent(user.id, email_id, receipt.sent_at)
    if sent is None:
        raise _email_not_found()
    logger.info(
        "follow_up.sent",
        email_id=str(email_id),
        message_id=receipt.message_id,
        recipient_count=receipt.recipient_count,
    )
    return sent
