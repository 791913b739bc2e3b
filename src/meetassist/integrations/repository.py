"""Calendar integration repository -- user-scoped async CRUD."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.meetassist.integrations.models import CalendarIntegrationModel
from src.meetassist.integrations.schemas import (
    CalendarIntegration,
    CalendarIntegrationCreate,
)


def _model_to_integration(model: CalendarIntegrationModel) -> CalendarIntegration:
    return CalendarIntegration(
        id=model.id,
        user_id=model.user_id,
        provider=model.provider,
        provider_user_id=model.provider_user_id,
        email=model.email,
        is_connected=model.is_connected,
        created_at=model.created_at,
        updated_at=model.updated_at or model.created_at,
    )


class IntegrationRepository:
    """Async CRUD for calendar integrations, always filtered by owner."""

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    async def _get_owned(
        self, session: AsyncSession, user_id: uuid.UUID, integration_id: uuid.UUID
    ) -> CalendarIntegrationModel | None:
        result = await session.execute(
            select(CalendarIntegrationModel).where(
                CalendarIntegrationModel.id == integration_id,
                CalendarIntegrationModel.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_integrations(self, user_id: uuid.UUID) -> list[CalendarIntegration]:
        async for session in self._session_factory():
            result = await session.execute(
                select(CalendarIntegrationModel)
                .where(CalendarIntegrationModel.user_id == user_id)
                .order_by(CalendarIntegrationModel.created_at.desc())
            )
            return [_model_to_integration(m) for m in result.scalars().all()]

    async def create_integration(
        self, user_id: uuid.UUID, data: CalendarIntegrationCreate
    ) -> CalendarIntegration:
        async for session in self._session_factory():
            model = CalendarIntegrationModel(user_id=user_id, **data.model_dump())
            session.add(model)
            await session.commit()
            await session.refresh(model)
            return _model_to_integration(model)

    async def get_integration(
        self, user_id: uuid.UUID, integration_id: uuid.UUID
    ) -> CalendarIntegration | None:
        async for session in self._session_factory():
            model = await self._get_owned(session, user_id, integration_id)
            return _model_to_integration(model) if model else None

    async def update_integration(
        self, user_id: uuid.UUID, integration_id: uuid.UUID, changes: dict[str, Any]
    ) -> CalendarIntegration | None:
        async for session in self._session_factory():
            model = await self._get_owned(session, user_id, integration_id)
            if model is None:
                return None
            for field, value in changes.items():
                setattr(model, field, value)
            await session.commit()
            await session.refresh(model)
            return _model_to_integration(model)

    async def delete_integration(
        self, user_id: uuid.UUID, integration_id: uuid.UUID
    ) -> bool:
        async for session in self._session_factory():
            model = await self._get_owned(session, user_id, integration_id)
            if model is None:
                return False
            await session.delete(model)
            await session.commit()
            return True
