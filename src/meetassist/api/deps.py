"""FastAPI dependency injection for authentication and app-scoped services.

Repositories and stub services live on app.state (set up in the lifespan
handler). Routers read them through get_state() so a missing component
yields a clean 503 instead of an AttributeError.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import HTTPException, Request, status

from src.meetassist.core.errors import ApiError
from src.meetassist.core.security import verify_token
from src.meetassist.users.schemas import User


def get_state(request: Request, name: str, label: str) -> Any:
    """Return app.state.<name>, 503 if it was never initialized."""
    component = getattr(request.app.state, name, None)
    if component is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} not initialized",
        )
    return component


def bearer_token(request: Request) -> str | None:
    """Extract the raw token from an `Authorization: Bearer ...` header."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        return token or None
    return None


async def resolve_user(user_repository: Any, token: str) -> User:
    """Validate an access token and load its (active) user.

    Raises:
        ApiError(403): Token is malformed, expired, or not an access token.
        ApiError(401): Token is valid but the user is gone or deactivated.
    """
    payload = verify_token(token, token_type="access")
    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise ApiError(
            status_code=status.HTTP_403_FORBIDDEN,
            message="Invalid or expired token",
            error_code="AUTH_TOKEN_INVALID",
        )
    user = await user_repository.get_user(user_id)
    if user is None or not user.is_active:
        raise ApiError(
            status_code=status.HTTP_401_UNAUTHORIZED,
            message="User not found or inactive",
            error_code="AUTH_TOKEN_INVALID",
        )
    return user


async def get_current_user(request: Request) -> User:
    """Extract and validate the current user from the bearer JWT.

    Raises:
        ApiError(401): No token supplied, or the token's user no longer exists.
        ApiError(403): The token cannot be validated.
    """
    token = bearer_token(request)
    if token is None:
        raise ApiError(
            status_code=status.HTTP_401_UNAUTHORIZED,
            message="Access token required",
            error_code="AUTH_TOKEN_REQUIRED",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user_repository = get_state(request, "user_repository", "User repository")
    return await resolve_user(user_repository, token)

