"""Action item endpoints."""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, Request, Response, status

from src.meetassist.action_items.schemas import (
    ActionItem,
    ActionItemCreate,
    ActionItemFilter,
    ActionItemList,
    ActionItemSortField,
    ActionItemStatus,
    ActionItemUpdate,
)
from src.meetassist.api.deps import get_current_user, get_state
from src.meetassist.core.errors import no_updates, not_found
from src.meetassist.schemas.common import SortOrder, UtcDatetime
from src.meetassist.users.schemas import User

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/action-items", tags=["action-items"])


def _get_action_item_repository(request: Request) -> Any:
    return get_state(request, "action_item_repository", "Action item repository")


def _item_not_found():
    return not_found("Action item not found", "ACTION_ITEM_NOT_FOUND")


def action_item_filter(
    meeting_id: uuid.UUID | None = None,
    assignee: str | None = None,
    status_: ActionItemStatus | None = Query(None, alias="status"),
    deadline_before: UtcDatetime | None = None,
    deadline_after: UtcDatetime | None = None,
    limit: int = Query(20, gt=0, le=500),
    offset: int = Query(0, ge=0),
    sort_by: ActionItemSortField = ActionItemSortField.DEADLINE,
    sort_order: SortOrder = SortOrder.ASC,
) -> ActionItemFilter:
    return ActionItemFilter(
        meeting_id=meeting_id,
        assignee=assignee,
        status=status_,
        deadline_before=deadline_before,
        deadline_after=deadline_after,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("", response_model=ActionItemList)
async def list_action_items(
    request: Request,
    filters: ActionItemFilter = Depends(action_item_filter),
    user: User = Depends(get_current_user),
):
    items, total = await _get_action_item_repository(request).list_action_items(
        user.id, filters
    )
    return ActionItemList(action_items=items, total_count=total)


@router.post("", response_model=ActionItem, status_code=status.HTTP_201_CREATED)
async def create_action_item(
    body: ActionItemCreate,
    request: Request,
    user: User = Depends(get_current_user),
):
    meetings = get_state(request, "meeting_repository", "Meeting repository")
    if await meetings.get_meeting(user.id, body.meeting_id) is None:
        raise not_found("Meeting not found", "MEETING_NOT_FOUND")
    item = await _get_action_item_repository(request).create_action_item(body)
    logger.info("action_item.created", action_item_id=str(item.id), meeting_id=str(item.meeting_id))
    return item


@router.get("/{item_id}", response_model=ActionItem)
async def get_action_item(
    item_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    item = await _get_action_item_repository(request).get_action_item(user.id, item_id)
    if item is None:
        raise _item_not_found()
    return item


@router.put("/{item_id}", response_model=ActionItem)
async def update_action_item(
    item_id: uuid.UUID,
    body: ActionItemUpdate,
    request: Request,
    user: User = Depends(get_current_user),
):
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise no_updates()
    item = await _get_action_item_repository(request).update_action_item(
        user.id, item_id, changes
    )
    if item is None:
        raise _item_not_found()
    return item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_action_item(
    item_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    if not await _get_action_item_repository(request).delete_action_item(user.id, item_id):
        raise _item_not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
