"""Pydantic v2 schemas for agents and agent templates."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.meetassist.schemas.common import ListParams, SortOrder


# ── Enums ────────────────────────────────────────────────────────────────────


class AgentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PAUSED = "paused"


class ParticipationLevel(str, Enum):
    """How vocal an agent is during a meeting."""

    OBSERVER = "observer"
    ACTIVE_PARTICIPANT = "active_participant"
    PASSIVE_OBSERVER = "passive_observer"


class AgentSortField(str, Enum):
    NAME = "name"
    LAST_USED_AT = "last_used_at"
    CREATED_AT = "created_at"


class TemplateSortField(str, Enum):
    NAME = "name"
    CREATED_AT = "created_at"


# ── Agents ───────────────────────────────────────────────────────────────────


class Agent(BaseModel):
    """Configured AI agent."""

    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    meeting_type: str
    status: AgentStatus = AgentStatus.ACTIVE
    participation_level: ParticipationLevel = ParticipationLevel.OBSERVER
    primary_objectives: str
    voice_settings: str | None = None
    custom_instructions: str | None = None
    speaking_triggers: str | None = None
    note_taking_focus: str | None = None
    follow_up_templates: str | None = None
    last_used_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class AgentCreate(BaseModel):
    """Request schema for creating an agent."""

    name: str = Field(min_length=1, max_length=255)
    meeting_type: str = Field(min_length=1, max_length=255)
    status: AgentStatus = AgentStatus.ACTIVE
    participation_level: ParticipationLevel = ParticipationLevel.OBSERVER
    primary_objectives: str = Field(min_length=1)
    voice_settings: str | None = None
    custom_instructions: str | None = None
    speaking_triggers: str | None = None
    note_taking_focus: str | None = None
    follow_up_templates: str | None = None


class AgentUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    name: str | None = Field(None, min_length=1, max_length=255)
    meeting_type: str | None = Field(None, min_length=1, max_length=255)
    status: AgentStatus | None = None
    participation_level: ParticipationLevel | None = None
    primary_objectives: str | None = Field(None, min_length=1)
    voice_settings: str | None = None
    custom_instructions: str | None = None
    speaking_triggers: str | None = None
    note_taking_focus: str | None = None
    follow_up_templates: str | None = None


class AgentFilter(ListParams):
    meeting_type: str | None = None
    status: AgentStatus | None = None
    participation_level: ParticipationLevel | None = None
    sort_by: AgentSortField = AgentSortField.CREATED_AT


class AgentList(BaseModel):
    agents: list[Agent]
    total_count: int


# ── Templates ────────────────────────────────────────────────────────────────


class AgentTemplate(BaseModel):
    """Reusable agent preset."""

    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    meeting_type: str
    participation_level: ParticipationLevel
    primary_objectives: str
    voice_settings: str | None = None
    custom_instructions: str | None = None
    is_public: bool = False
    created_at: datetime
    updated_at: datetime


class AgentTemplateCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    meeting_type: str = Field(min_length=1, max_length=255)
    participation_level: ParticipationLevel = ParticipationLevel.OBSERVER
    primary_objectives: str = Field(min_length=1)
    voice_settings: str | None = None
    custom_instructions: str | None = None
    is_public: bool = False


class AgentTemplateUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    meeting_type: str | None = Field(None, min_length=1, max_length=255)
    participation_level: ParticipationLevel | None = None
    primary_objectives: str | None = Field(None, min_length=1)
    voice_settings: str | None = None
    custom_instructions: str | None = None
    is_public: bool | None = None


class AgentTemplateFilter(ListParams):
    meeting_type: str | None = None
    participation_level: ParticipationLevel | None = None
    is_public: bool | None = None
    sort_by: TemplateSortField = TemplateSortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC


class AgentTemplateList(BaseModel):
    templates: list[AgentTemplate]
    total_count: int
