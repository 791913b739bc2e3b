"""Pydantic v2 schemas for calendar integrations."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class CalendarIntegration(BaseModel):
    """Calendar connection as returned by the API.

    OAuth tokens are write-only and never serialized back to clients.
    """

    id: uuid.UUID
    user_id: uuid.UUID
    provider: str
    provider_user_id: str | None = None
    email: str | None = None
    is_connected: bool = False
    created_at: datetime
    updated_at: datetime


class CalendarIntegrationCreate(BaseModel):
    provider: str = Field(min_length=1, max_length=255)
    provider_user_id: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)
    access_token: str | None = Field(None, max_length=500)
    refresh_token: str | None = Field(None, max_length=500)
    is_connected: bool = False


class CalendarIntegrationUpdate(BaseModel):
    provider_user_id: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)
    access_token: str | None = Field(None, max_length=500)
    refresh_token: str | None = Field(None, max_length=500)
    is_connected: bool | None = None


class CalendarEvent(BaseModel):
    """An event pulled from a provider during sync."""

    id: str
    title: str
    start_time: datetime
    end_time: datetime
    attendees: list[str] = Field(default_factory=list)


class CalendarSyncResult(BaseModel):
    events: list[CalendarEvent]
    sync_status: str
    last_sync: datetime


class CalendarIntegrationList(BaseModel):
    integrations: list[CalendarIntegration]
    total_count: int
