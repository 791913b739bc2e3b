"""Current-user profile, preferences, and password endpoints."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request, status

from src.meetassist.api.deps import get_current_user, get_state
from src.meetassist.api.routes.auth import check_new_password
from src.meetassist.core.errors import ApiError, no_updates
from src.meetassist.core.security import hash_password, verify_password
from src.meetassist.users.schemas import (
    MessageResponse,
    PasswordChange,
    Preferences,
    PreferencesUpdate,
    User,
    UserUpdate,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _get_user_repository(request: Request) -> Any:
    return get_state(request, "user_repository", "User repository")


@router.get("/me", response_model=User)
async def get_me(user: User = Depends(get_current_user)):
    return user


@router.put("/me", response_model=User)
async def update_me(
    body: UserUpdate,
    request: Request,
    user: User = Depends(get_current_user),
):
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise no_updates()
    updated = await _get_user_repository(request).update_user(user.id, changes)
    if updated is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, "User not found", "USER_NOT_FOUND")
    return updated


@router.get("/me/preferences", response_model=Preferences)
async def get_preferences(request: Request, user: User = Depends(get_current_user)):
    prefs = await _get_user_repository(request).get_preferences(user.id)
    if prefs is None:
        raise ApiError(
            status.HTTP_404_NOT_FOUND, "User preferences not found", "PREFERENCES_NOT_FOUND"
        )
    return prefs


@router.put("/me/preferences", response_model=Preferences)
async def update_preferences(
    body: PreferencesUpdate,
    request: Request,
    user: User = Depends(get_current_user),
):
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise no_updates()
    prefs = await _get_user_repository(request).update_preferences(user.id, changes)
    if prefs is None:
        raise ApiError(
            status.HTTP_404_NOT_FOUND, "User preferences not found", "PREFERENCES_NOT_FOUND"
        )
    return prefs


@router.put("/me/password", response_model=MessageResponse)
async def change_password(
    body: PasswordChange,
    request: Request,
    user: User = Depends(get_current_user),
):
    """Change password after re-checking the current one."""
    if not body.current_password or not body.new_password:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "Current password and new password are required",
            "MISSING_REQUIRED_FIELDS",
        )
    new_password = check_new_password(body.new_password)
    repo = _get_user_repository(request)
    stored_hash = await repo.get_password_hash(user.id)
    if stored_hash is None or not verify_password(body.current_password, stored_hash):
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Current password is incorrect",
            "INVALID_CURRENT_PASSWORD",
        )
    await repo.set_password(user.id, hash_password(new_password))
    logger.info("user.password_changed", user_id=str(user.id))
    return MessageResponse(message="Password updated successfully")
