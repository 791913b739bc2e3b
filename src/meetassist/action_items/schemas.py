"""Pydantic v2 schemas for action items."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.meetassist.schemas.common import ListParams, SortOrder, UtcDatetime


class ActionItemStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ActionItemSortField(str, Enum):
    DEADLINE = "deadline"
    CREATED_AT = "created_at"
    STATUS = "status"


class ActionItem(BaseModel):
    id: uuid.UUID
    meeting_id: uuid.UUID
    description: str
    assignee: str
    deadline: datetime
    status: ActionItemStatus = ActionItemStatus.PENDING
    comments: str | None = None
    created_at: datetime
    updated_at: datetime


class ActionItemCreate(BaseModel):
    meeting_id: uuid.UUID
    description: str = Field(min_length=1)
    assignee: str = Field(min_length=1, max_length=255)
    deadline: UtcDatetime
    status: ActionItemStatus = ActionItemStatus.PENDING
    comments: str | None = None


class ActionItemUpdate(BaseModel):
    description: str | None = Field(None, min_length=1)
    assignee: str | None = Field(None, min_length=1, max_length=255)
    deadline: UtcDatetime | None = None
    status: ActionItemStatus | None = None
    comments: str | None = None


class ActionItemFilter(ListParams):
    meeting_id: uuid.UUID | None = None
    assignee: str | None = None
    status: ActionItemStatus | None = None
    deadline_before: UtcDatetime | None = None
    deadline_after: UtcDatetime | None = None
    sort_by: ActionItemSortField = ActionItemSortField.DEADLINE
    sort_order: SortOrder = SortOrder.ASC


class ActionItemList(BaseModel):
    action_items: list[ActionItem]
    total_count: int
