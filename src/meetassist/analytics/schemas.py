"""Pydantic v2 schemas for analytics and the dashboard."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from src.meetassist.action_items.schemas import ActionItem
from src.meetassist.meetings.schemas import Meeting
from src.meetassist.schemas.common import ListParams, UtcDatetime


class DateRange(str, Enum):
    """Dashboard window presets."""

    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"


class AnalyticsSortField(str, Enum):
    PERIOD_START = "period_start"
    CREATED_AT = "created_at"


class MeetingAnalytics(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    total_meeting_time: int = 0
    participation_distribution: str | None = None
    action_item_completion_rate: float | None = None
    meeting_sentiment_trends: str | None = None
    period_start: datetime
    period_end: datetime
    created_at: datetime
    updated_at: datetime


class AnalyticsFilter(ListParams):
    period_start: UtcDatetime | None = None
    period_end: UtcDatetime | None = None
    sort_by: AnalyticsSortField = AnalyticsSortField.PERIOD_START


class AnalyticsList(BaseModel):
    analytics: list[MeetingAnalytics]
    total_count: int


class AgentUsage(BaseModel):
    agent_id: uuid.UUID
    agent_name: str
    meeting_count: int


class Dashboard(BaseModel):
    """Aggregated view for the dashboard landing page."""

    date_range: DateRange
    period_start: datetime
    period_end: datetime
    total_meetings: int
    total_meeting_time: int
    action_item_completion_rate: float
    upcoming_meetings: list[Meeting]
    recent_action_items: list[ActionItem]
    agent_usage: list[AgentUsage]
