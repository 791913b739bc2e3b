"""Shared fixtures for API and realtime tests.

Provides:
- In-memory repository test doubles with the same async interface as the
  SQLAlchemy repositories (no database required)
- The real application from create_app() with the doubles and seeded
  stub services placed on app.state (the lifespan is not run)
- An async HTTP client and registered users with bearer headers
"""

from __future__ import annotations

import random
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.meetassist.action_items.schemas import (
    ActionItem,
    ActionItemCreate,
    ActionItemFilter,
    ActionItemStatus,
)
from src.meetassist.agents.repository import copy_name
from src.meetassist.agents.schemas import (
    Agent,
    AgentCreate,
    AgentFilter,
    AgentTemplate,
    AgentTemplateCreate,
    AgentTemplateFilter,
)
from src.meetassist.analytics.schemas import (
    AgentUsage,
    AnalyticsFilter,
    Dashboard,
    DateRange,
    MeetingAnalytics,
)
from src.meetassist.analytics.windows import completion_rate
from src.meetassist.follow_ups.schemas import (
    EmailStatus,
    FollowUpEmail,
    FollowUpEmailCreate,
    FollowUpEmailFilter,
)
from src.meetassist.integrations.schemas import (
    CalendarIntegration,
    CalendarIntegrationCreate,
)
from src.meetassist.meetings.schemas import (
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
from src.meetassist.realtime.manager import ConnectionManager
from src.meetassist.schemas.common import SortOrder
from src.meetassist.services import (
    AgentResponder,
    CalendarClient,
    EmailSender,
    Summarizer,
    Transcriber,
)
from src.meetassist.users.schemas import (
    PasswordResetToken,
    Preferences,
    User,
    UserCredentials,
)

TEST_PASSWORD = "correct-horse-battery"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _page(items: list, key: str, order: SortOrder, limit: int, offset: int) -> tuple[list, int]:
    """Sort by attribute with None last, then slice."""
    present = [i for i in items if getattr(i, key) is not None]
    missing = [i for i in items if getattr(i, key) is None]
    present.sort(key=lambda i: getattr(i, key), reverse=order == SortOrder.DESC)
    ordered = present + missing
    return ordered[offset : offset + limit], len(ordered)


def _apply(model, changes: dict[str, Any]):
    return model.model_copy(update={**changes, "updated_at": _now()})


# ── In-Memory Test Doubles ───────────────────────────────────────────────────


class InMemoryUserRepository:
    def __init__(self) -> None:
        self.users: dict[uuid.UUID, User] = {}
        self.hashes: dict[uuid.UUID, str] = {}
        self.preferences: dict[uuid.UUID, Preferences] = {}
        self.reset_tokens: dict[str, PasswordResetToken] = {}

    async def create_user(self, email: str, full_name: str, password_hash: str) -> User:
        now = _now()
        user = User(
            id=uuid.uuid4(),
            email=email.lower(),
            full_name=full_name,
            created_at=now,
            updated_at=now,
        )
        self.users[user.id] = user
        self.hashes[user.id] = password_hash
        self.preferences[user.id] = Preferences(
            id=uuid.uuid4(), user_id=user.id, created_at=now, updated_at=now
        )
        return user

    async def get_user(self, user_id: uuid.UUID) -> User | None:
        return self.users.get(user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        for user in self.users.values():
            if user.email == email.lower():
                return user
        return None

    async def get_credentials(self, email: str) -> UserCredentials | None:
        user = await self.get_user_by_email(email)
        if user is None:
            return None
        return UserCredentials(user=user, password_hash=self.hashes[user.id])

    async def get_password_hash(self, user_id: uuid.UUID) -> str | None:
        return self.hashes.get(user_id)

    async def update_user(self, user_id: uuid.UUID, changes: dict[str, Any]) -> User | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        self.users[user_id] = _apply(user, changes)
        return self.users[user_id]

    async def set_password(self, user_id: uuid.UUID, password_hash: str) -> None:
        if user_id not in self.users:
            raise ValueError(f"User not found: {user_id}")
        self.hashes[user_id] = password_hash

    async def get_preferences(self, user_id: uuid.UUID) -> Preferences | None:
        return self.preferences.get(user_id)

    async def update_preferences(
        self, user_id: uuid.UUID, changes: dict[str, Any]
    ) -> Preferences | None:
        prefs = self.preferences.get(user_id)
        if prefs is None:
            return None
        self.preferences[user_id] = _apply(prefs, changes)
        return self.preferences[user_id]

    async def create_reset_token(
        self, user_id: uuid.UUID, token: str, expires_at: datetime
    ) -> PasswordResetToken:
        reset = PasswordResetToken(token=token, user_id=user_id, expires_at=expires_at)
        self.reset_tokens[token] = reset
        return reset

    async def get_reset_token(self, token: str) -> PasswordResetToken | None:
        return self.reset_tokens.get(token)

    async def delete_reset_token(self, token: str) -> None:
        self.reset_tokens.pop(token, None)


class InMemoryIntegrationRepository:
    def __init__(self) -> None:
        self.integrations: dict[uuid.UUID, CalendarIntegration] = {}
        self.tokens: dict[uuid.UUID, tuple[str | None, str | None]] = {}

    async def list_integrations(self, user_id: uuid.UUID) -> list[CalendarIntegration]:
        return [i for i in self.integrations.values() if i.user_id == user_id]

    async def create_integration(
        self, user_id: uuid.UUID, data: CalendarIntegrationCreate
    ) -> CalendarIntegration:
        now = _now()
        integration = CalendarIntegration(
            id=uuid.uuid4(),
            user_id=user_id,
            created_at=now,
            updated_at=now,
            **data.model_dump(exclude={"access_token", "refresh_token"}),
        )
        self.integrations[integration.id] = integration
        self.tokens[integration.id] = (data.access_token, data.refresh_token)
        return integration

    async def get_integration(
        self, user_id: uuid.UUID, integration_id: uuid.UUID
    ) -> CalendarIntegration | None:
        integration = self.integrations.get(integration_id)
        if integration and integration.user_id == user_id:
            return integration
        return None

    async def update_integration(
        self, user_id: uuid.UUID, integration_id: uuid.UUID, changes: dict[str, Any]
    ) -> CalendarIntegration | None:
        integration = await self.get_integration(user_id, integration_id)
        if integration is None:
            return None
        visible = {k: v for k, v in changes.items() if k not in ("access_token", "refresh_token")}
        self.integrations[integration_id] = _apply(integration, visible)
        return self.integrations[integration_id]

    async def delete_integration(self, user_id: uuid.UUID, integration_id: uuid.UUID) -> bool:
        if await self.get_integration(user_id, integration_id) is None:
            return False
        del self.integrations[integration_id]
        return True


class InMemoryAgentRepository:
    def __init__(self) -> None:
        self.agents: dict[uuid.UUID, Agent] = {}
        self.templates: dict[uuid.UUID, AgentTemplate] = {}

    async def list_agents(
        self, user_id: uuid.UUID, filters: AgentFilter
    ) -> tuple[list[Agent], int]:
        result = [a for a in self.agents.values() if a.user_id == user_id]
        if filters.meeting_type:
            result = [a for a in result if a.meeting_type == filters.meeting_type]
        if filters.status:
            result = [a for a in result if a.status == filters.status]
        if filters.participation_level:
            result = [
                a for a in result if a.participation_level == filters.participation_level
            ]
        return _page(
            result, filters.sort_by.value, filters.sort_order, filters.limit, filters.offset
        )

    async def create_agent(self, user_id: uuid.UUID, data: AgentCreate) -> Agent:
        now = _now()
        agent = Agent(
            id=uuid.uuid4(), user_id=user_id, created_at=now, updated_at=now, **data.model_dump()
        )
        self.agents[agent.id] = agent
        return agent

    async def get_agent(self, user_id: uuid.UUID, agent_id: uuid.UUID) -> Agent | None:
        agent = self.agents.get(agent_id)
        if agent and agent.user_id == user_id:
            return agent
        return None

    async def update_agent(
        self, user_id: uuid.UUID, agent_id: uuid.UUID, changes: dict[str, Any]
    ) -> Agent | None:
        agent = await self.get_agent(user_id, agent_id)
        if agent is None:
            return None
        self.agents[agent_id] = _apply(agent, changes)
        return self.agents[agent_id]

    async def delete_agent(self, user_id: uuid.UUID, agent_id: uuid.UUID) -> bool:
        if await self.get_agent(user_id, agent_id) is None:
            return False
        del self.agents[agent_id]
        return True

    async def duplicate_agent(self, user_id: uuid.UUID, agent_id: uuid.UUID) -> Agent | None:
        original = await self.get_agent(user_id, agent_id)
        if original is None:
            return None
        now = _now()
        copy = original.model_copy(
            update={
                "id": uuid.uuid4(),
                "name": copy_name(original.name),
                "last_used_at": None,
                "created_at": now,
                "updated_at": now,
            }
        )
        self.agents[copy.id] = copy
        return copy

    async def touch_last_used(
        self, user_id: uuid.UUID, agent_id: uuid.UUID, when: datetime
    ) -> None:
        await self.update_agent(user_id, agent_id, {"last_used_at": when})

    def _visible(self, user_id: uuid.UUID, template: AgentTemplate) -> bool:
        return template.user_id == user_id or template.is_public

    async def list_templates(
        self, user_id: uuid.UUID, filters: AgentTemplateFilter
    ) -> tuple[list[AgentTemplate], int]:
        result = [t for t in self.templates.values() if self._visible(user_id, t)]
        if filters.meeting_type:
            result = [t for t in result if t.meeting_type == filters.meeting_type]
        if filters.participation_level:
            result = [
                t for t in result if t.participation_level == filters.participation_level
            ]
        if filters.is_public is not None:
            result = [t for t in result if t.is_public == filters.is_public]
        return _page(
            result, filters.sort_by.value, filters.sort_order, filters.limit, filters.offset
        )

    async def create_template(
        self, user_id: uuid.UUID, data: AgentTemplateCreate
    ) -> AgentTemplate:
        now = _now()
        template = AgentTemplate(
            id=uuid.uuid4(), user_id=user_id, created_at=now, updated_at=now, **data.model_dump()
        )
        self.templates[template.id] = template
        return template

    async def get_template(
        self, user_id: uuid.UUID, template_id: uuid.UUID
    ) -> AgentTemplate | None:
        template = self.templates.get(template_id)
        if template and self._visible(user_id, template):
            return template
        return None

    async def update_template(
        self, user_id: uuid.UUID, template_id: uuid.UUID, changes: dict[str, Any]
    ) -> AgentTemplate | None:
        template = self.templates.get(template_id)
        if template is None or template.user_id != user_id:
            return None
        self.templates[template_id] = _apply(template, changes)
        return self.templates[template_id]

    async def delete_template(self, user_id: uuid.UUID, template_id: uuid.UUID) -> bool:
        template = self.templates.get(template_id)
        if template is None or template.user_id != user_id:
            return False
        del self.templates[template_id]
        return True


class InMemoryMeetingRepository:
    def __init__(self) -> None:
        self.meetings: dict[uuid.UUID, Meeting] = {}
        self.assignments: list[MeetingAgent] = []
        self.participants: list[Participant] = []
        self.summaries: dict[uuid.UUID, Summary] = {}
        self.transcripts: list[Transcript] = []
        self.recordings: dict[uuid.UUID, Recording] = {}

    def owner_of(self, meeting_id: uuid.UUID) -> uuid.UUID | None:
        meeting = self.meetings.get(meeting_id)
        return meeting.user_id if meeting else None

    async def list_meetings(
        self, user_id: uuid.UUID, filters: MeetingFilter
    ) -> tuple[list[Meeting], int]:
        result = [m for m in self.meetings.values() if m.user_id == user_id]
        if filters.meeting_type:
            result = [m for m in result if m.meeting_type == filters.meeting_type]
        if filters.status:
            result = [m for m in result if m.status == filters.status]
        if filters.start_date:
            result = [m for m in result if m.start_time >= filters.start_date]
        if filters.end_date:
            result = [m for m in result if m.end_time <= filters.end_date]
        if filters.agent_id:
            assigned = {a.meeting_id for a in self.assignments if a.agent_id == filters.agent_id}
            result = [m for m in result if m.id in assigned]
        return _page(
            result, filters.sort_by.value, filters.sort_order, filters.limit, filters.offset
        )

    async def create_meeting(self, user_id: uuid.UUID, data: MeetingCreate) -> Meeting:
        now = _now()
        meeting = Meeting(
            id=uuid.uuid4(), user_id=user_id, created_at=now, updated_at=now, **data.model_dump()
        )
        self.meetings[meeting.id] = meeting
        return meeting

    async def get_meeting(self, user_id: uuid.UUID, meeting_id: uuid.UUID) -> Meeting | None:
        meeting = self.meetings.get(meeting_id)
        if meeting and meeting.user_id == user_id:
            return meeting
        return None

    async def update_meeting(
        self, user_id: uuid.UUID, meeting_id: uuid.UUID, changes: dict[str, Any]
    ) -> Meeting | None:
        meeting = await self.get_meeting(user_id, meeting_id)
        if meeting is None:
            return None
        self.meetings[meeting_id] = _apply(meeting, changes)
        return self.meetings[meeting_id]

    async def delete_meeting(self, user_id: uuid.UUID, meeting_id: uuid.UUID) -> bool:
        if await self.get_meeting(user_id, meeting_id) is None:
            return False
        del self.meetings[meeting_id]
        self.summaries.pop(meeting_id, None)
        self.recordings.pop(meeting_id, None)
        return True

    async def get_assignment(
        self, meeting_id: uuid.UUID, agent_id: uuid.UUID
    ) -> MeetingAgent | None:
        for assignment in self.assignments:
            if assignment.meeting_id == meeting_id and assignment.agent_id == agent_id:
                return assignment
        return None

    async def assign_agent(self, meeting_id: uuid.UUID, agent_id: uuid.UUID) -> MeetingAgent:
        assignment = MeetingAgent(id=uuid.uuid4(), meeting_id=meeting_id, agent_id=agent_id)
        self.assignments.append(assignment)
        return assignment

    async def list_participants(
        self, meeting_id: uuid.UUID, email: str | None = None, limit: int = 50
    ) -> tuple[list[Participant], int]:
        result = [p for p in self.participants if p.meeting_id == meeting_id]
        if email:
            result = [p for p in result if p.email == email]
        return result[:limit], len(result)

    async def add_participant(
        self, meeting_id: uuid.UUID, data: ParticipantCreate
    ) -> Participant:
        participant = Participant(
            id=uuid.uuid4(), meeting_id=meeting_id, created_at=_now(), **data.model_dump()
        )
        self.participants.append(participant)
        return participant

    async def get_summary(self, meeting_id: uuid.UUID) -> Summary | None:
        return self.summaries.get(meeting_id)

    async def update_summary(
        self, meeting_id: uuid.UUID, changes: dict[str, Any]
    ) -> Summary | None:
        summary = self.summaries.get(meeting_id)
        if summary is None:
            return None
        if "edited_summary" in changes:
            changes = {**changes, "edited_at": _now()}
        self.summaries[meeting_id] = _apply(summary, changes)
        return self.summaries[meeting_id]

    async def save_generated_summary(
        self, meeting_id: uuid.UUID, draft: SummaryDraft
    ) -> Summary:
        now = _now()
        previous = self.summaries.get(meeting_id)
        summary = Summary(
            id=previous.id if previous else uuid.uuid4(),
            meeting_id=meeting_id,
            generated_at=now,
            created_at=previous.created_at if previous else now,
            updated_at=now,
            **draft.model_dump(exclude={"processing_time"}),
        )
        self.summaries[meeting_id] = summary
        return summary

    async def list_transcripts(
        self, meeting_id: uuid.UUID, filters: TranscriptFilter
    ) -> tuple[list[Transcript], int]:
        result = [t for t in self.transcripts if t.meeting_id == meeting_id]
        if filters.speaker:
            result = [t for t in result if t.speaker == filters.speaker]
        if filters.start_time:
            result = [t for t in result if t.timestamp >= filters.start_time]
        if filters.end_time:
            result = [t for t in result if t.timestamp <= filters.end_time]
        return _page(
            result, filters.sort_by.value, filters.sort_order, filters.limit, filters.offset
        )

    async def add_transcript(
        self,
        meeting_id: uuid.UUID,
        content: str,
        timestamp: datetime,
        speaker: str | None = None,
    ) -> Transcript:
        transcript = Transcript(
            id=uuid.uuid4(),
            meeting_id=meeting_id,
            speaker=speaker,
            content=content,
            timestamp=timestamp,
            created_at=_now(),
        )
        self.transcripts.append(transcript)
        return transcript

    async def get_recording(self, meeting_id: uuid.UUID) -> Recording | None:
        return self.recordings.get(meeting_id)

    async def save_recording(self, meeting_id: uuid.UUID, changes: dict[str, Any]) -> Recording:
        recording = self.recordings.get(meeting_id)
        if recording is None:
            recording = Recording(id=uuid.uuid4(), meeting_id=meeting_id, created_at=_now())
        self.recordings[meeting_id] = recording.model_copy(update=changes)
        return self.recordings[meeting_id]


class InMemoryActionItemRepository:
    def __init__(self, meetings: InMemoryMeetingRepository) -> None:
        self._meetings = meetings
        self.items: dict[uuid.UUID, ActionItem] = {}

    def _owned(self, user_id: uuid.UUID) -> list[ActionItem]:
        return [i for i in self.items.values() if self._meetings.owner_of(i.meeting_id) == user_id]

    async def list_action_items(
        self, user_id: uuid.UUID, filters: ActionItemFilter
    ) -> tuple[list[ActionItem], int]:
        result = self._owned(user_id)
        if filters.meeting_id:
            result = [i for i in result if i.meeting_id == filters.meeting_id]
        if filters.assignee:
            result = [i for i in result if i.assignee == filters.assignee]
        if filters.status:
            result = [i for i in result if i.status == filters.status]
        if filters.deadline_before:
            result = [i for i in result if i.deadline <= filters.deadline_before]
        if filters.deadline_after:
            result = [i for i in result if i.deadline >= filters.deadline_after]
        return _page(
            result, filters.sort_by.value, filters.sort_order, filters.limit, filters.offset
        )

    async def create_action_item(self, data: ActionItemCreate) -> ActionItem:
        now = _now()
        item = ActionItem(id=uuid.uuid4(), created_at=now, updated_at=now, **data.model_dump())
        self.items[item.id] = item
        return item

    async def get_action_item(self, user_id: uuid.UUID, item_id: uuid.UUID) -> ActionItem | None:
        item = self.items.get(item_id)
        if item and self._meetings.owner_of(item.meeting_id) == user_id:
            return item
        return None

    async def update_action_item(
        self, user_id: uuid.UUID, item_id: uuid.UUID, changes: dict[str, Any]
    ) -> ActionItem | None:
        item = await self.get_action_item(user_id, item_id)
        if item is None:
            return None
        self.items[item_id] = _apply(item, changes)
        return self.items[item_id]

    async def delete_action_item(self, user_id: uuid.UUID, item_id: uuid.UUID) -> bool:
        if await self.get_action_item(user_id, item_id) is None:
            return False
        del self.items[item_id]
        return True


class InMemoryFollowUpEmailRepository:
    def __init__(self, meetings: InMemoryMeetingRepository) -> None:
        self._meetings = meetings
        self.emails: dict[uuid.UUID, FollowUpEmail] = {}

    async def list_emails(
        self, user_id: uuid.UUID, filters: FollowUpEmailFilter
    ) -> tuple[list[FollowUpEmail], int]:
        result = [
            e for e in self.emails.values() if self._meetings.owner_of(e.meeting_id) == user_id
        ]
        if filters.meeting_id:
            result = [e for e in result if e.meeting_id == filters.meeting_id]
        if filters.status:
            result = [e for e in result if e.status == filters.status]
        if filters.scheduled_before:
            result = [
                e
                for e in result
                if e.scheduled_send_time and e.scheduled_send_time <= filters.scheduled_before
            ]
        if filters.scheduled_after:
            result = [
                e
                for e in result
                if e.scheduled_send_time and e.scheduled_send_time >= filters.scheduled_after
            ]
        return _page(
            result, filters.sort_by.value, filters.sort_order, filters.limit, filters.offset
        )

    async def create_email(self, data: FollowUpEmailCreate) -> FollowUpEmail:
        now = _now()
        email = FollowUpEmail(id=uuid.uuid4(), created_at=now, updated_at=now, **data.model_dump())
        self.emails[email.id] = email
        return email

    async def get_email(self, user_id: uuid.UUID, email_id: uuid.UUID) -> FollowUpEmail | None:
        email = self.emails.get(email_id)
        if email and self._meetings.owner_of(email.meeting_id) == user_id:
            return email
        return None

    async def update_email(
        self, user_id: uuid.UUID, email_id: uuid.UUID, changes: dict[str, Any]
    ) -> FollowUpEmail | None:
        email = await self.get_email(user_id, email_id)
        if email is None:
            return None
        self.emails[email_id] = _apply(email, changes)
        return self.emails[email_id]

    async def mark_sent(
        self, user_id: uuid.UUID, email_id: uuid.UUID, sent_at: datetime
    ) -> FollowUpEmail | None:
        return await self.update_email(
            user_id, email_id, {"status": EmailStatus.SENT, "sent_at": sent_at}
        )

    async def delete_email(self, user_id: uuid.UUID, email_id: uuid.UUID) -> bool:
        if await self.get_email(user_id, email_id) is None:
            return False
        del self.emails[email_id]
        return True


class InMemoryAnalyticsRepository:
    """Stores analytics rows; the dashboard is computed from the other doubles."""

    def __init__(
        self,
        meetings: InMemoryMeetingRepository,
        action_items: InMemoryActionItemRepository,
        agents: InMemoryAgentRepository,
    ) -> None:
        self._meetings = meetings
        self._action_items = action_items
        self._agents = agents
        self.rows: list[MeetingAnalytics] = []
        self.dashboard_calls: list[tuple[DateRange, datetime, datetime]] = []

    async def list_analytics(
        self, user_id: uuid.UUID, filters: AnalyticsFilter
    ) -> tuple[list[MeetingAnalytics], int]:
        result = [r for r in self.rows if r.user_id == user_id]
        if filters.period_start:
            result = [r for r in result if r.period_start >= filters.period_start]
        if filters.period_end:
            result = [r for r in result if r.period_end <= filters.period_end]
        return _page(
            result, filters.sort_by.value, filters.sort_order, filters.limit, filters.offset
        )

    async def get_dashboard(
        self,
        user_id: uuid.UUID,
        date_range: DateRange,
        start: datetime,
        end: datetime,
        now: datetime,
    ) -> Dashboard:
        self.dashboard_calls.append((date_range, start, end))
        meetings = [m for m in self._meetings.meetings.values() if m.user_id == user_id]
        in_window = [m for m in meetings if start <= m.created_at <= end]
        completed = [
            m
            for m in meetings
            if m.status == MeetingStatus.COMPLETED and m.start_time >= start and m.end_time <= end
        ]
        completed_seconds = sum((m.end_time - m.start_time).total_seconds() for m in completed)
        items = self._action_items._owned(user_id)
        windowed_items = [i for i in items if start <= i.created_at <= end]
        done = [i for i in windowed_items if i.status == ActionItemStatus.COMPLETED]
        window_ids = {m.id for m in in_window}
        usage = [
            AgentUsage(
                agent_id=a.id,
                agent_name=a.name,
                meeting_count=sum(
                    1
                    for s in self._meetings.assignments
                    if s.agent_id == a.id and s.meeting_id in window_ids
                ),
            )
            for a in self._agents.agents.values()
            if a.user_id == user_id
        ]
        usage.sort(key=lambda u: (-u.meeting_count, u.agent_name))
        upcoming = sorted(
            (
                m
                for m in meetings
                if m.status == MeetingStatus.SCHEDULED and m.start_time > now
            ),
            key=lambda m: m.start_time,
        )[:5]
        open_items = sorted(
            (i for i in items if i.status != ActionItemStatus.COMPLETED),
            key=lambda i: i.deadline,
        )[:10]
        return Dashboard(
            date_range=date_range,
            period_start=start,
            period_end=end,
            total_meetings=len(in_window),
            total_meeting_time=int(completed_seconds // 60),
            action_item_completion_rate=completion_rate(len(windowed_items), len(done)),
            upcoming_meetings=upcoming,
            recent_action_items=open_items,
            agent_usage=usage,
        )


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def store() -> SimpleNamespace:
    """One set of repository doubles sharing state the way tables would."""
    users = InMemoryUserRepository()
    agents = InMemoryAgentRepository()
    meetings = InMemoryMeetingRepository()
    action_items = InMemoryActionItemRepository(meetings)
    return SimpleNamespace(
        users=users,
        integrations=InMemoryIntegrationRepository(),
        agents=agents,
        meetings=meetings,
        action_items=action_items,
        follow_ups=InMemoryFollowUpEmailRepository(meetings),
        analytics=InMemoryAnalyticsRepository(meetings, action_items, agents),
    )


@pytest.fixture
def app(store):
    """The real application with test doubles on app.state."""
    from src.meetassist.main import create_app

    application = create_app()
    application.state.user_repository = store.users
    application.state.integration_repository = store.integrations
    application.state.agent_repository = store.agents
    application.state.meeting_repository = store.meetings
    application.state.action_item_repository = store.action_items
    application.state.follow_up_email_repository = store.follow_ups
    application.state.analytics_repository = store.analytics
    application.state.calendar_client = CalendarClient()
    application.state.transcriber = Transcriber(rng=random.Random(7))
    application.state.summarizer = Summarizer()
    application.state.email_sender = EmailSender()
    application.state.agent_responder = AgentResponder(rng=random.Random(7))
    application.state.connection_manager = ConnectionManager()
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _register(client: AsyncClient, email: str, full_name: str) -> dict:
    response = await client.post(
        "/api/auth/register",
        json={"email": email, "full_name": full_name, "password": TEST_PASSWORD},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def alice(client) -> dict:
    """Registered user; includes `headers` for authenticated calls."""
    data = await _register(client, "alice@example.com", "Alice Johnson")
    data["headers"] = {"Authorization": f"Bearer {data['auth_token']}"}
    data["password"] = TEST_PASSWORD
    return data


@pytest_asyncio.fixture
async def bob(client) -> dict:
    data = await _register(client, "bob@example.com", "Bob Smith")
    data["headers"] = {"Authorization": f"Bearer {data['auth_token']}"}
    data["password"] = TEST_PASSWORD
    return data


def meeting_payload(**overrides) -> dict:
    payload = {
        "title": "Weekly Sync",
        "meeting_type": "standup",
        "start_time": "2030-01-10T15:00:00Z",
        "end_time": "2030-01-10T15:30:00Z",
    }
    payload.update(overrides)
    return payload


def agent_payload(**overrides) -> dict:
    payload = {
        "name": "Note Taker",
        "meeting_type": "standup",
        "primary_objectives": "Capture decisions and owners",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_meeting(client):
    async def _make(headers: dict, **overrides) -> dict:
        response = await client.post(
            "/api/meetings", json=meeting_payload(**overrides), headers=headers
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_agent(client):
    async def _make(headers: dict, **overrides) -> dict:
        response = await client.post(
            "/api/agents", json=agent_payload(**overrides), headers=headers
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make
