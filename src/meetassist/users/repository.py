"""User repository -- async CRUD for accounts, preferences, and reset tokens.

Uses the session_factory callable pattern: each method opens one session,
performs its work, and commits at most once.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.meetassist.users.models import (
    PasswordResetTokenModel,
    UserModel,
    UserPreferencesModel,
)
from src.meetassist.users.schemas import (
    PasswordResetToken,
    Preferences,
    User,
    UserCredentials,
)

logger = structlog.get_logger(__name__)


# ── Serialization Helpers ───────────────────────────────────────────────────


def _model_to_user(model: UserModel) -> User:
    return User(
        id=model.id,
        email=model.email,
        full_name=model.full_name,
        profile_picture_url=model.profile_picture_url,
        email_verified=model.email_verified,
        is_active=model.is_active,
        created_at=model.created_at,
        updated_at=model.updated_at or model.created_at,
    )


def _model_to_preferences(model: UserPreferencesModel) -> Preferences:
    return Preferences(
        id=model.id,
        user_id=model.user_id,
        email_notifications=model.email_notifications,
        push_notifications=model.push_notifications,
        follow_up_reminders=model.follow_up_reminders,
        created_at=model.created_at,
        updated_at=model.updated_at or model.created_at,
    )


# ── Repository ──────────────────────────────────────────────────────────────


class UserRepository:
    """Async persistence for users and their satellite rows.

    Args:
        session_factory: Async callable that yields AsyncSession instances.
    """

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    # ── Users ────────────────────────────────────────────────────────────

    async def create_user(
        self, email: str, full_name: str, password_hash: str
    ) -> User:
        """Create a user and their default preferences in one transaction."""
        async for session in self._session_factory():
            model = UserModel(
                email=email.lower(),
                full_name=full_name,
                password_hash=password_hash,
            )
            session.add(model)
            await session.flush()
            session.add(UserPreferencesModel(user_id=model.id))
            await session.commit()
            await session.refresh(model)
            logger.info("user.created", user_id=str(model.id))
            return _model_to_user(model)

    async def get_user(self, user_id: uuid.UUID) -> User | None:
        async for session in self._session_factory():
            model = await session.get(UserModel, user_id)
            return _model_to_user(model) if model else None

    async def get_user_by_email(self, email: str) -> User | None:
        async for session in self._session_factory():
            result = await session.execute(
                select(UserModel).where(UserModel.email == email.lower())
            )
            model = result.scalar_one_or_none()
            return _model_to_user(model) if model else None

    async def get_credentials(self, email: str) -> UserCredentials | None:
        """Look up a user by email along with the stored password hash."""
        async for session in self._session_factory():
            result = await session.execute(
                select(UserModel).where(UserModel.email == email.lower())
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None
            return UserCredentials(
                user=_model_to_user(model), password_hash=model.password_hash
            )

    async def get_password_hash(self, user_id: uuid.UUID) -> str | None:
        async for session in self._session_factory():
            model = await session.get(UserModel, user_id)
            return model.password_hash if model else None

    async def update_user(
        self, user_id: uuid.UUID, changes: dict[str, Any]
    ) -> User | None:
        async for session in self._session_factory():
            model = await session.get(UserModel, user_id)
            if model is None:
                return None
            for field, value in changes.items():
                setattr(model, field, value)
            await session.commit()
            await session.refresh(model)
            return _model_to_user(model)

    async def set_password(self, user_id: uuid.UUID, password_hash: str) -> None:
        async for session in self._session_factory():
            model = await session.get(UserModel, user_id)
            if model is None:
                raise ValueError(f"User not found: {user_id}")
            model.password_hash = password_hash
            await session.commit()

    # ── Preferences ──────────────────────────────────────────────────────

    async def get_preferences(self, user_id: uuid.UUID) -> Preferences | None:
        async for session in self._session_factory():
            result = await session.execute(
                select(UserPreferencesModel).where(
                    UserPreferencesModel.user_id == user_id
                )
            )
            model = result.scalar_one_or_none()
            return _model_to_preferences(model) if model else None

    async def update_preferences(
        self, user_id: uuid.UUID, changes: dict[str, Any]
    ) -> Preferences | None:
        async for session in self._session_factory():
            result = await session.execute(
                select(UserPreferencesModel).where(
                    UserPreferencesModel.user_id == user_id
                )
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None
            for field, value in changes.items():
                setattr(model, field, value)
            await session.commit()
            await session.refresh(model)
            return _model_to_preferences(model)

    # ── Password Reset Tokens ────────────────────────────────────────────

    async def create_reset_token(
        self, user_id: uuid.UUID, token: str, expires_at: datetime
    ) -> PasswordResetToken:
        async for session in self._session_factory():
            session.add(
                PasswordResetTokenModel(
                    user_id=user_id, token=token, expires_at=expires_at
                )
            )
            await session.commit()
            return PasswordResetToken(
                token=token, user_id=user_id, expires_at=expires_at
            )

    async def get_reset_token(self, token: str) -> PasswordResetToken | None:
        async for session in self._session_factory():
            result = await session.execute(
                select(PasswordResetTokenModel).where(
                    PasswordResetTokenModel.token == token
                )
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None
            return PasswordResetToken(
                token=model.token, user_id=model.user_id, expires_at=model.expires_at
            )

    async def delete_reset_token(self, token: str) -> None:
        async for session in self._session_factory():
            await session.execute(
                delete(PasswordResetTokenModel).where(
                    PasswordResetTokenModel.token == token
                )
            )
            await session.commit()
