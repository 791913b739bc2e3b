"""Mock calendar provider client."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import structlog

from src.meetassist.integrations.schemas import (
    CalendarEvent,
    CalendarIntegration,
    CalendarSyncResult,
)

logger = structlog.get_logger(__name__)


class CalendarClient:
    """Returns two fixed upcoming events, one and two days out."""

    async def fetch_events(self, integration: CalendarIntegration) -> CalendarSyncResult:
        now = datetime.now(timezone.utc)
        events = [
            CalendarEvent(
                id=f"cal_event_{uuid.uuid4().hex[:12]}",
                title="Team Standup",
                start_time=now + timedelta(hours=24),
                end_time=now + timedelta(hours=25),
                attendees=["john@example.com", "jane@example.com"],
            ),
            CalendarEvent(
                id=f"cal_event_{uuid.uuid4().hex[:12]}",
                title="Client Review Meeting",
                start_time=now + timedelta(hours=48),
                end_time=now + timedelta(hours=49),
                attendees=["client@example.com"],
            ),
        ]
        logger.info(
            "calendar.synced",
            integration_id=str(integration.id),
            provider=integration.provider,
            event_count=len(events),
        )
        return CalendarSyncResult(events=events, sync_status="successful", last_sync=now)
