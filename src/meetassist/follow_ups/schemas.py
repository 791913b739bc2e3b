"""Pydantic v2 schemas for follow-up emails."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.meetassist.schemas.common import ListParams, SortOrder, UtcDatetime


class EmailStatus(str, Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    SENT = "sent"
    FAILED = "failed"
    CANCELLED = "cancelled"


class EmailSortField(str, Enum):
    SCHEDULED_SEND_TIME = "scheduled_send_time"
    CREATED_AT = "created_at"
    SENT_AT = "sent_at"


class FollowUpEmail(BaseModel):
    id: uuid.UUID
    meeting_id: uuid.UUID
    template_id: str | None = None
    recipients: str
    subject: str
    body: str
    scheduled_send_time: datetime | None = None
    sent_at: datetime | None = None
    status: EmailStatus = EmailStatus.DRAFT
    attachments: str | None = None
    created_at: datetime
    updated_at: datetime


class FollowUpEmailCreate(BaseModel):
    meeting_id: uuid.UUID
    template_id: str | None = Field(None, max_length=255)
    recipients: str = Field(min_length=1, description="Comma-separated addresses")
    subject: str = Field(min_length=1, max_length=500)
    body: str = Field(min_length=1)
    scheduled_send_time: UtcDatetime | None = None
    status: EmailStatus = EmailStatus.DRAFT
    attachments: str | None = None


class FollowUpEmailUpdate(BaseModel):
    template_id: str | None = Field(None, max_length=255)
    recipients: str | None = Field(None, min_length=1)
    subject: str | None = Field(None, min_length=1, max_length=500)
    body: str | None = Field(None, min_length=1)
    scheduled_send_time: UtcDatetime | None = None
    status: EmailStatus | None = None
    attachments: str | None = None


class FollowUpEmailFilter(ListParams):
    meeting_id: uuid.UUID | None = None
    status: EmailStatus | None = None
    scheduled_before: UtcDatetime | None = None
    scheduled_after: UtcDatetime | None = None
    sort_by: EmailSortField = EmailSortField.SCHEDULED_SEND_TIME
    sort_order: SortOrder = SortOrder.ASC


class FollowUpEmailList(BaseModel):
    follow_up_emails: list[FollowUpEmail]
    total_count: int


class DeliveryReceipt(BaseModel):
    """What the mail transport reports back after a send."""

    email_id: uuid.UUID
    delivery_status: str
    sent_at: datetime
    recipient_count: int
    message_id: str
