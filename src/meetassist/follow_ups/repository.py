"""Follow-up email repository.

Like action items, emails are owned through their meeting; every lookup
joins meetings and filters on the meeting's user.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.meetassist.core.query import apply_paging, count_rows
from src.meetassist.follow_ups.models import FollowUpEmailModel
from src.meetassist.follow_ups.schemas import (
    EmailStatus,
    FollowUpEmail,
    FollowUpEmailCreate,
    FollowUpEmailFilter,
)
from src.meetassist.meetings.models import MeetingModel

logger = structlog.get_logger(__name__)


def _model_to_email(model: FollowUpEmailModel) -> FollowUpEmail:
    return FollowUpEmail(
        id=model.id,
        meeting_id=model.meeting_id,
        template_id=model.template_id,
        recipients=model.recipients,
        subject=model.subject,
        body=model.body,
        scheduled_send_time=model.scheduled_send_time,
        sent_at=model.sent_at,
        status=EmailStatus(model.status),
        attachments=model.attachments,
        created_at=model.created_at,
        updated_at=model.updated_at or model.created_at,
    )


_SORT_COLUMNS = {
    "scheduled_send_time": FollowUpEmailModel.scheduled_send_time,
    "created_at": FollowUpEmailModel.created_at,
    "sent_at": FollowUpEmailModel.sent_at,
}


def _owned_emails(user_id: uuid.UUID):
    return (
        select(FollowUpEmailModel)
        .join(MeetingModel, MeetingModel.id == FollowUpEmailModel.meeting_id)
        .where(MeetingModel.user_id == user_id)
    )


class FollowUpEmailRepository:
    """Async CRUD for follow-up emails scoped through meeting ownership."""

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    async def _get_owned(
        self, session: AsyncSession, user_id: uuid.UUID, email_id: uuid.UUID
    ) -> FollowUpEmailModel | None:
        result = await session.execute(
            _owned_emails(user_id).where(FollowUpEmailModel.id == email_id)
        )
        return result.scalar_one_or_none()

    async def list_emails(
        self, user_id: uuid.UUID, filters: FollowUpEmailFilter
    ) -> tuple[list[FollowUpEmail], int]:
        async for session in self._session_factory():
            stmt = _owned_emails(user_id)
            if filters.meeting_id:
                stmt = stmt.where(FollowUpEmailModel.meeting_id == filters.meeting_id)
            if filters.status:
                stmt = stmt.where(FollowUpEmailModel.status == filters.status.value)
            if filters.scheduled_before:
                stmt = stmt.where(
                    FollowUpEmailModel.scheduled_send_time <= filters.scheduled_before
                )
            if filters.scheduled_after:
                stmt = stmt.where(
                    FollowUpEmailModel.scheduled_send_time >= filters.scheduled_after
                )
            total = await count_rows(session, stmt)
            stmt = apply_paging(
                stmt,
                _SORT_COLUMNS[filters.sort_by.value],
                filters.sort_order,
                filters.limit,
                filters.offset,
                tiebreak=FollowUpEmailModel.id,
            )
            result = await session.execute(stmt)
            return [_model_to_email(m) for m in result.scalars().all()], total

    async def create_email(self, data: FollowUpEmailCreate) -> FollowUpEmail:
        """Insert a draft. The caller has already checked meeting ownership."""
        async for session in self._session_factory():
            values = data.model_dump()
            values["status"] = data.status.value
            model = FollowUpEmailModel(**values)
            session.add(model)
            await session.commit()
            await session.refresh(model)
            return _model_to_email(model)

    async def get_email(
        self, user_id: uuid.UUID, email_id: uuid.UUID
    ) -> FollowUpEmail | None:
        async for session in self._session_factory():
            model = await self._get_owned(session, user_id, email_id)
            return _model_to_email(model) if model else None

    async def update_email(
        self, user_id: uuid.UUID, email_id: uuid.UUID, changes: dict[str, Any]
    ) -> FollowUpEmail | None:
        async for session in self._session_factory():
            model = await self._get_owned(session, user_id, email_id)
            if model is None:
                return None
            for field, value in changes.items():
                setattr(model, field, getattr(value, "value", value))
            await session.commit()
            await session.refresh(model)
            return _model_to_email(model)

    async def mark_sent(
        self, user_id: uuid.UUID, email_id: uuid.UUID, sent_at: datetime
    ) -> FollowUpEmail | None:
        email = await self.update_email(
            user_id, email_id, {"status": EmailStatus.SENT, "sent_at": sent_at}
        )
        if email is not None:
            logger.info("follow_up.marked_sent", email_id=str(email_id))
        return email

    async def delete_email(self, user_id: uuid.UUID, email_id: uuid.UUID) -> bool:
        async for session in self._session_factory():
            model = await self._get_owned(session, user_id, email_id)
            if model is None:
                return False
            await session.delete(model)
            await session.commit()
            return True
