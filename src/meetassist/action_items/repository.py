"""Action item repository.

Action items have no user column; every query joins through meetings so
a user only ever sees items on meetings they own.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.meetassist.action_items.models import ActionItemModel
from src.meetassist.action_items.schemas import (
    ActionItem,
    ActionItemCreate,
    ActionItemFilter,
    ActionItemStatus,
)
from src.meetassist.core.query import apply_paging, count_rows
from src.meetassist.meetings.models import MeetingModel


def _model_to_action_item(model: ActionItemModel) -> ActionItem:
    return ActionItem(
        id=model.id,
        meeting_id=model.meeting_id,
        description=model.description,
        assignee=model.assignee,
        deadline=model.deadline,
        status=ActionItemStatus(model.status),
        comments=model.comments,
        created_at=model.created_at,
        updated_at=model.updated_at or model.created_at,
    )


_SORT_COLUMNS = {
    "deadline": ActionItemModel.deadline,
    "created_at": ActionItemModel.created_at,
    "status": ActionItemModel.status,
}


def _owned_items(user_id: uuid.UUID):
    return (
        select(ActionItemModel)
        .join(MeetingModel, MeetingModel.id == ActionItemModel.meeting_id)
        .where(MeetingModel.user_id == user_id)
    )


class ActionItemRepository:
    """Async CRUD for action items scoped through meeting ownership."""

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    async def _get_owned(
        self, session: AsyncSession, user_id: uuid.UUID, item_id: uuid.UUID
    ) -> ActionItemModel | None:
        result = await session.execute(
            _owned_items(user_id).where(ActionItemModel.id == item_id)
        )
        return result.scalar_one_or_none()

    async def list_action_items(
        self, user_id: uuid.UUID, filters: ActionItemFilter
    ) -> tuple[list[ActionItem], int]:
        async for session in self._session_factory():
            stmt = _owned_items(user_id)
            if filters.meeting_id:
                stmt = stmt.where(ActionItemModel.meeting_id == filters.meeting_id)
            if filters.assignee:
                stmt = stmt.where(ActionItemModel.assignee == filters.assignee)
            if filters.status:
                stmt = stmt.where(ActionItemModel.status == filters.status.value)
            if filters.deadline_before:
                stmt = stmt.where(ActionItemModel.deadline <= filters.deadline_before)
            if filters.deadline_after:
                stmt = stmt.where(ActionItemModel.deadline >= filters.deadline_after)
            total = await count_rows(session, stmt)
            stmt = apply_paging(
                stmt,
                _SORT_COLUMNS[filters.sort_by.value],
                filters.sort_order,
                filters.limit,
                filters.offset,
                tiebreak=ActionItemModel.id,
            )
            result = await session.execute(stmt)
            return [_model_to_action_item(m) for m in result.scalars().all()], total

    async def create_action_item(self, data: ActionItemCreate) -> ActionItem:
        """Insert an item. The caller has already checked meeting ownership."""
        async for session in self._session_factory():
            values = data.model_dump()
            values["status"] = data.status.value
            model = ActionItemModel(**values)
            session.add(model)
            await session.commit()
            await session.refresh(model)
            return _model_to_action_item(model)

    async def get_action_item(
        self, user_id: uuid.UUID, item_id: uuid.UUID
    ) -> ActionItem | None:
        async for session in self._session_factory():
            model = await self._get_owned(session, user_id, item_id)
            return _model_to_action_item(model) if model else None

    async def update_action_item(
        self, user_id: uuid.UUID, item_id: uuid.UUID, changes: dict[str, Any]
    ) -> ActionItem | None:
        async for session in self._session_factory():
            model = await self._get_owned(session, user_id, item_id)
            if model is None:
                return None
            for field, value in changes.items():
                setattr(model, field, getattr(value, "value", value))
            await session.commit()
            await session.refresh(model)
            return _model_to_action_item(model)

    async def delete_action_item(self, user_id: uuid.UUID, item_id: uuid.UUID) -> bool:
        async for session in self._session_factory():
            model = await self._get_owned(session, user_id, item_id)
            if model is None:
                return False
            await session.delete(model)
            await session.commit()
            return True
