"""AI agent endpoints: search, CRUD, duplicate, archive, and restore."""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, Request, Response, status

from src.meetassist.agents.schemas import (
    Agent,
    AgentCreate,
    AgentFilter,
    AgentList,
    AgentSortField,
    AgentStatus,
    AgentUpdate,
    ParticipationLevel,
)
from src.meetassist.api.deps import get_current_user, get_state
from src.meetassist.core.errors import no_updates, not_found
from src.meetassist.schemas.common import SortOrder
from src.meetassist.users.schemas import User

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/agents", tags=["agents"])


def _get_agent_repository(request: Request) -> Any:
    return get_state(request, "agent_repository", "Agent repository")


def _agent_not_found():
    return not_found("Agent not found", "AGENT_NOT_FOUND")


def agent_filter(
    meeting_type: str | None = None,
    status_: AgentStatus | None = Query(None, alias="status"),
    participation_level: ParticipationLevel | None = None,
    limit: int = Query(20, gt=0, le=500),
    offset: int = Query(0, ge=0),
    sort_by: AgentSortField = AgentSortField.CREATED_AT,
    sort_order: SortOrder = SortOrder.DESC,
) -> AgentFilter:
    return AgentFilter(
        meeting_type=meeting_type,
        status=status_,
        participation_level=participation_level,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("", response_model=AgentList)
async def list_agents(
    request: Request,
    filters: AgentFilter = Depends(agent_filter),
    user: User = Depends(get_current_user),
):
    agents, total = await _get_agent_repository(request).list_agents(user.id, filters)
    return AgentList(agents=agents, total_count=total)


@router.post("", response_model=Agent, status_code=status.HTTP_201_CREATED)
async def create_agent(
    body: AgentCreate,
    request: Request,
    user: User = Depends(get_current_user),
):
    return await _get_agent_repository(request).create_agent(user.id, body)


@router.get("/{agent_id}", response_model=Agent)
async def get_agent(
    agent_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    agent = await _get_agent_repository(request).get_agent(user.id, agent_id)
    if agent is None:
        raise _agent_not_found()
    return agent


@router.put("/{agent_id}", response_model=Agent)
async def update_agent(
    agent_id: uuid.UUID,
    body: AgentUpdate,
    request: Request,
    user: User = Depends(get_current_user),
):
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise no_updates()
    agent = await _get_agent_repository(request).update_agent(user.id, agent_id, changes)
    if agent is None:
        raise _agent_not_found()
    return agent


@router.delete("/{agent_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_agent(
    agent_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    if not await _get_agent_repository(request).delete_agent(user.id, agent_id):
        raise _agent_not_found()
    logger.info("agent.deleted", agent_id=str(agent_id), user_id=str(user.id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{agent_id}/duplicate", response_model=Agent, status_code=status.HTTP_201_CREATED)
async def duplicate_agent(
    agent_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    """Copy an agent's configuration as a new agent named "<name> (Copy)"."""
    agent = await _get_agent_repository(request).duplicate_agent(user.id, agent_id)
    if agent is None:
        raise _agent_not_found()
    return agent


async def _set_status(
    request: Request, user: User, agent_id: uuid.UUID, new_status: AgentStatus
) -> Agent:
    agent = await _get_agent_repository(request).update_agent(
        user.id, agent_id, {"status": new_status}
    )
    if agent is None:
        raise _agent_not_found()
    logger.info("agent.status_changed", agent_id=str(agent_id), status=new_status.value)
    return agent


@router.post("/{agent_id}/archive", response_model=Agent)
async def archive_agent(
    agent_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    return await _set_status(request, user, agent_id, AgentStatus.INACTIVE)


@router.post("/{agent_id}/restore", response_model=Agent)
async def restore_agent(
    agent_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    return await _set_status(request, user, agent_id, AgentStatus.ACTIVE)
