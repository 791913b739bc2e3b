"""Agent repository -- async CRUD for agents and agent templates.

Agents are private to their owner. Templates are readable by their owner
and, when is_public is set, by everyone; only the owner may change them.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.meetassist.agents.models import AgentModel, AgentTemplateModel
from src.meetassist.agents.schemas import (
    Agent,
    AgentCreate,
    AgentFilter,
    AgentStatus,
    AgentTemplate,
    AgentTemplateCreate,
    AgentTemplateFilter,
    ParticipationLevel,
)
from src.meetassist.core.query import apply_paging, count_rows

logger = structlog.get_logger(__name__)

COPY_SUFFIX = " (Copy)"


# ── Serialization Helpers ───────────────────────────────────────────────────


def _model_to_agent(model: AgentModel) -> Agent:
    return Agent(
        id=model.id,
        user_id=model.user_id,
        name=model.name,
        meeting_type=model.meeting_type,
        status=AgentStatus(model.status),
        participation_level=ParticipationLevel(model.participation_level),
        primary_objectives=model.primary_objectives,
        voice_settings=model.voice_settings,
        custom_instructions=model.custom_instructions,
        speaking_triggers=model.speaking_triggers,
        note_taking_focus=model.note_taking_focus,
        follow_up_templates=model.follow_up_templates,
        last_used_at=model.last_used_at,
        created_at=model.created_at,
        updated_at=model.updated_at or model.created_at,
    )


def _model_to_template(model: AgentTemplateModel) -> AgentTemplate:
    return AgentTemplate(
        id=model.id,
        user_id=model.user_id,
        name=model.name,
        meeting_type=model.meeting_type,
        participation_level=ParticipationLevel(model.participation_level),
        primary_objectives=model.primary_objectives,
        voice_settings=model.voice_settings,
        custom_instructions=model.custom_instructions,
        is_public=model.is_public,
        created_at=model.created_at,
        updated_at=model.updated_at or model.created_at,
    )


def copy_name(name: str) -> str:
    """Name for a duplicated agent, kept within the 255 character column."""
    return f"{name[: 255 - len(COPY_SUFFIX)]}{COPY_SUFFIX}"


def _enum_values(changes: dict[str, Any]) -> dict[str, Any]:
    """Flatten enum members to their stored string values."""
    return {k: getattr(v, "value", v) for k, v in changes.items()}


_AGENT_SORT_COLUMNS = {
    "name": AgentModel.name,
    "last_used_at": AgentModel.last_used_at,
    "created_at": AgentModel.created_at,
}

_TEMPLATE_SORT_COLUMNS = {
    "name": AgentTemplateModel.name,
    "created_at": AgentTemplateModel.created_at,
}


# ── Repository ──────────────────────────────────────────────────────────────


class AgentRepository:
    """Async persistence for agents and templates.

    Args:
        session_factory: Async callable that yields AsyncSession instances.
    """

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    async def _get_owned_agent(
        self, session: AsyncSession, user_id: uuid.UUID, agent_id: uuid.UUID
    ) -> AgentModel | None:
        result = await session.execute(
            select(AgentModel).where(
                AgentModel.id == agent_id, AgentModel.user_id == user_id
            )
        )
        return result.scalar_one_or_none()

    # ── Agents ───────────────────────────────────────────────────────────

    async def list_agents(
        self, user_id: uuid.UUID, filters: AgentFilter
    ) -> tuple[list[Agent], int]:
        """Search the user's agents.

        Returns:
            Tuple of (page of agents, total matching count).
        """
        async for session in self._session_factory():
            stmt = select(AgentModel).where(AgentModel.user_id == user_id)
            if filters.meeting_type:
                stmt = stmt.where(AgentModel.meeting_type == filters.meeting_type)
            if filters.status:
                stmt = stmt.where(AgentModel.status == filters.status.value)
            if filters.participation_level:
                stmt = stmt.where(
                    AgentModel.participation_level == filters.participation_level.value
                )
            total = await count_rows(session, stmt)
            stmt = apply_paging(
                stmt,
                _AGENT_SORT_COLUMNS[filters.sort_by.value],
                filters.sort_order,
                filters.limit,
                filters.offset,
                tiebreak=AgentModel.id,
            )
            result = await session.execute(stmt)
            return [_model_to_agent(m) for m in result.scalars().all()], total

    async def create_agent(self, user_id: uuid.UUID, data: AgentCreate) -> Agent:
        async for session in self._session_factory():
            model = AgentModel(user_id=user_id, **_enum_values(data.model_dump()))
            session.add(model)
            await session.commit()
            await session.refresh(model)
            logger.info("agent.created", agent_id=str(model.id), user_id=str(user_id))
            return _model_to_agent(model)

    async def get_agent(self, user_id: uuid.UUID, agent_id: uuid.UUID) -> Agent | None:
        async for session in self._session_factory():
            model = await self._get_owned_agent(session, user_id, agent_id)
            return _model_to_agent(model) if model else None

    async def update_agent(
        self, user_id: uuid.UUID, agent_id: uuid.UUID, changes: dict[str, Any]
    ) -> Agent | None:
        async for session in self._session_factory():
            model = await self._get_owned_agent(session, user_id, agent_id)
            if model is None:
                return None
            for field, value in _enum_values(changes).items():
                setattr(model, field, value)
            await session.commit()
            await session.refresh(model)
            return _model_to_agent(model)

    async def delete_agent(self, user_id: uuid.UUID, agent_id: uuid.UUID) -> bool:
        async for session in self._session_factory():
            model = await self._get_owned_agent(session, user_id, agent_id)
            if model is None:
                return False
            await session.delete(model)
            await session.commit()
            return True

    async def duplicate_agent(
        self, user_id: uuid.UUID, agent_id: uuid.UUID
    ) -> Agent | None:
        """Copy an agent's configuration under a "(Copy)" name."""
        async for session in self._session_factory():
            original = await self._get_owned_agent(session, user_id, agent_id)
            if original is None:
                return None
            model = AgentModel(
                user_id=user_id,
                name=copy_name(original.name),
                meeting_type=original.meeting_type,
                status=original.status,
                participation_level=original.participation_level,
                primary_objectives=original.primary_objectives,
                voice_settings=original.voice_settings,
                custom_instructions=original.custom_instructions,
                speaking_triggers=original.speaking_triggers,
                note_taking_focus=original.note_taking_focus,
                follow_up_templates=original.follow_up_templates,
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            return _model_to_agent(model)

    async def touch_last_used(
        self, user_id: uuid.UUID, agent_id: uuid.UUID, when: datetime
    ) -> None:
        await self.update_agent(user_id, agent_id, {"last_used_at": when})

    # ── Templates ────────────────────────────────────────────────────────

    async def list_templates(
        self, user_id: uuid.UUID, filters: AgentTemplateFilter
    ) -> tuple[list[AgentTemplate], int]:
        async for session in self._session_factory():
            stmt = select(AgentTemplateModel).where(
                or_(
                    AgentTemplateModel.user_id == user_id,
                    AgentTemplateModel.is_public.is_(True),
                )
            )
            if filters.meeting_type:
                stmt = stmt.where(AgentTemplateModel.meeting_type == filters.meeting_type)
            if filters.participation_level:
                stmt = stmt.where(
                    AgentTemplateModel.participation_level
                    == filters.participation_level.value
                )
            if filters.is_public is not None:
                stmt = stmt.where(AgentTemplateModel.is_public.is_(filters.is_public))
            total = await count_rows(session, stmt)
            stmt = apply_paging(
                stmt,
                _TEMPLATE_SORT_COLUMNS[filters.sort_by.value],
                filters.sort_order,
                filters.limit,
                filters.offset,
                tiebreak=AgentTemplateModel.id,
            )
            result = await session.execute(stmt)
            return [_model_to_template(m) for m in result.scalars().all()], total

    async def create_template(
        self, user_id: uuid.UUID, data: AgentTemplateCreate
    ) -> AgentTemplate:
        async for session in self._session_factory():
            model = AgentTemplateModel(user_id=user_id, **_enum_values(data.model_dump()))
            session.add(model)
            await session.commit()
            await session.refresh(model)
            return _model_to_template(model)

    async def get_template(
        self, user_id: uuid.UUID, template_id: uuid.UUID
    ) -> AgentTemplate | None:
        """Own or public template by id."""
        async for session in self._session_factory():
            result = await session.execute(
                select(AgentTemplateModel).where(
                    AgentTemplateModel.id == template_id,
                    or_(
                        AgentTemplateModel.user_id == user_id,
                        AgentTemplateModel.is_public.is_(True),
                    ),
                )
            )
            model = result.scalar_one_or_none()
            return _model_to_template(model) if model else None

    async def update_template(
        self, user_id: uuid.UUID, template_id: uuid.UUID, changes: dict[str, Any]
    ) -> AgentTemplate | None:
        async for session in self._session_factory():
            result = await session.execute(
                select(AgentTemplateModel).where(
                    AgentTemplateModel.id == template_id,
                    AgentTemplateModel.user_id == user_id,
                )
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None
            for field, value in _enum_values(changes).items():
                setattr(model, field, value)
            await session.commit()
            await session.refresh(model)
            return _model_to_template(model)

    async def delete_template(
        self, user_id: uuid.UUID, template_id: uuid.UUID
    ) -> bool:
        async for session in self._session_factory():
            result = await session.execute(
                select(AgentTemplateModel).where(
                    AgentTemplateModel.id == template_id,
                    AgentTemplateModel.user_id == user_id,
                )
            )
            model = result.scalar_one_or_none()
            if model is None:
                return False
            await session.delete(model)
            await session.commit()
            return True
