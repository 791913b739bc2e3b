"""Agent template endpoints.

Templates are visible to their owner and, when public, to every user.
Only the owner can change or delete one; for anyone else it behaves as
missing.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query, Request, Response, status

from src.meetassist.agents.schemas import (
    AgentTemplate,
    AgentTemplateCreate,
    AgentTemplateFilter,
    AgentTemplateList,
    AgentTemplateUpdate,
    ParticipationLevel,
    TemplateSortField,
)
from src.meetassist.api.deps import get_current_user, get_state
from src.meetassist.core.errors import no_updates, not_found
from src.meetassist.schemas.common import SortOrder
from src.meetassist.users.schemas import User

router = APIRouter(prefix="/api/agent-templates", tags=["agent-templates"])


def _get_agent_repository(request: Request) -> Any:
    return get_state(request, "agent_repository", "Agent repository")


def _template_not_found():
    return not_found("Agent template not found", "TEMPLATE_NOT_FOUND")


def template_filter(
    meeting_type: str | None = None,
    participation_level: ParticipationLevel | None = None,
    is_public: bool | None = None,
    limit: int = Query(20, gt=0, le=500),
    offset: int = Query(0, ge=0),
    sort_by: TemplateSortField = TemplateSortField.CREATED_AT,
    sort_order: SortOrder = SortOrder.DESC,
) -> AgentTemplateFilter:
    return AgentTemplateFilter(
        meeting_type=meeting_type,
        participation_level=participation_level,
        is_public=is_public,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("", response_model=AgentTemplateList)
async def list_templates(
    request: Request,
    filters: AgentTemplateFilter = Depends(template_filter),
    user: User = Depends(get_current_user),
):
    templates, total = await _get_agent_repository(request).list_templates(user.id, filters)
    return AgentTemplateList(templates=templates, total_count=total)


@router.post("", response_model=AgentTemplate, status_code=status.HTTP_201_CREATED)
async def create_template(
    body: AgentTemplateCreate,
    request: Request,
    user: User = Depends(get_current_user),
):
    return await _get_agent_repository(request).create_template(user.id, body)


@router.get("/{template_id}", response_model=AgentTemplate)
async def get_template(
    template_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    template = await _get_agent_repository(request).get_template(user.id, template_id)
    if template is None:
        raise _template_not_found()
    return template


@router.put("/{template_id}", response_model=AgentTemplate)
async def update_template(
    template_id: uuid.UUID,
    body: AgentTemplateUpdate,
    request: Request,
    user: User = Depends(get_current_user),
):
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise no_updates()
    template = await _get_agent_repository(request).update_template(
        user.id, template_id, changes
    )
    if template is None:
        raise _template_not_found()
    return template


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    if not await _get_agent_repository(request).delete_template(user.id, template_id):
        raise _template_not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
