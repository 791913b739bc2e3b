"""Authentication API endpoints.

Provides registration, login, token refresh, and the two-step password
reset flow. None of these endpoints require an existing token.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import structlog
from fastapi import APIRouter, Request, status

from src.meetassist.api.deps import get_state
from src.meetassist.config import get_settings
from src.meetassist.core.errors import ApiError
from src.meetassist.core.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_token,
)
from src.meetassist.users.schemas import (
    MIN_PASSWORD_LENGTH,
    AuthResponse,
    LoginRequest,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    RefreshRequest,
    RegisterRequest,
    User,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _get_user_repository(request: Request) -> Any:
    return get_state(request, "user_repository", "User repository")


def _auth_response(user: User) -> AuthResponse:
    token_data = {"sub": str(user.id), "email": user.email}
    return AuthResponse(
        user=user,
        auth_token=create_access_token(token_data),
        refresh_token=create_refresh_token(token_data),
    )


def check_new_password(password: str | None) -> str:
    """Shared checks for password reset and password change."""
    if not password:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "New password is required",
            "MISSING_REQUIRED_FIELDS",
        )
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            "PASSWORD_TOO_SHORT",
        )
    return password


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, request: Request):
    """Create an account with default preferences and log it in."""
    repo = _get_user_repository(request)
    if await repo.get_user_by_email(body.email) is not None:
        raise ApiError(
            status.HTTP_409_CONFLICT,
            "User with this email already exists",
            "USER_ALREADY_EXISTS",
        )
    user = await repo.create_user(
        email=body.email,
        full_name=body.full_name,
        password_hash=hash_password(body.password),
    )
    logger.info("auth.registered", user_id=str(user.id))
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, request: Request):
    """Authenticate with email and password and return tokens."""
    if not body.email or not body.password:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "Email and password are required",
            "MISSING_REQUIRED_FIELDS",
        )
    repo = _get_user_repository(request)
    credentials = await repo.get_credentials(body.email)
    if (
        credentials is None
        or not credentials.user.is_active
        or not verify_password(body.password, credentials.password_hash)
    ):
        logger.warning("auth.login_failed", email=body.email.lower())
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid email or password",
            "INVALID_CREDENTIALS",
        )
    return _auth_response(credentials.user)


@router.post("/refresh", response_model=AuthResponse)
async def refresh(body: RefreshRequest, request: Request):
    """Exchange a refresh token for a new token pair."""
    payload = verify_token(body.refresh_token, token_type="refresh")
    repo = _get_user_repository(request)
    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        user_id = None
    user = await repo.get_user(user_id) if user_id else None
    if user is None or not user.is_active:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "User not found or inactive",
            "AUTH_TOKEN_INVALID",
        )
    return _auth_response(user)


@router.post("/password-reset", response_model=MessageResponse)
async def request_password_reset(body: PasswordResetRequest, request: Request):
    """Issue a one-hour reset token. Delivery is logged, not emailed."""
    repo = _get_user_repository(request)
    user = await repo.get_user_by_email(body.email)
    if user is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, "User not found", "USER_NOT_FOUND")

    settings = get_settings()
    token = str(uuid.uuid4())
    expires_at = datetime.now(timezone.utc) + timedelta(
        minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES
    )
    await repo.create_reset_token(user.id, token, expires_at)
    logger.info("auth.password_reset_requested", user_id=str(user.id))
    return MessageResponse(message="Password reset email sent")


@router.post("/password-reset/{token}", response_model=MessageResponse)
async def confirm_password_reset(token: str, body: PasswordResetConfirm, request: Request):
    """Set a new password using a reset token. Tokens are single-use."""
    new_password = check_new_password(body.new_password)
    repo = _get_user_repository(request)
    reset = await repo.get_reset_token(token)
    if reset is None or reset.expires_at <= datetime.now(timezone.utc):
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "Invalid or expired reset token",
            "INVALID_TOKEN",
        )
    await repo.set_password(reset.user_id, hash_password(new_password))
    await repo.delete_reset_token(token)
    logger.info("auth.password_reset_completed", user_id=str(reset.user_id))
    return MessageResponse(message="Password has been reset successfully")
