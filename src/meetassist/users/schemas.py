"""Pydantic v2 schemas for accounts, authentication, and preferences."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

MIN_PASSWORD_LENGTH = 8


# ── User ─────────────────────────────────────────────────────────────────────


class User(BaseModel):
    """Public view of a user account. Never carries the password hash."""

    id: uuid.UUID
    email: str
    full_name: str
    profile_picture_url: str | None = None
    email_verified: bool = False
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class UserCredentials(BaseModel):
    """A user together with the stored password hash, for login checks."""

    user: User
    password_hash: str


class UserUpdate(BaseModel):
    full_name: str | None = Field(None, min_length=1, max_length=255)
    profile_picture_url: str | None = Field(None, max_length=500)


# ── Preferences ──────────────────────────────────────────────────────────────


class Preferences(BaseModel):
    """Notification toggles for a user."""

    id: uuid.UUID
    user_id: uuid.UUID
    email_notifications: bool = True
    push_notifications: bool = True
    follow_up_reminders: bool = True
    created_at: datetime
    updated_at: datetime


class PreferencesUpdate(BaseModel):
    email_notifications: bool | None = None
    push_notifications: bool | None = None
    follow_up_reminders: bool | None = None


# ── Auth Requests ────────────────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register."""

    email: EmailStr
    full_name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=255)

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.lower()


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login.

    Fields are optional so missing values map to MISSING_REQUIRED_FIELDS
    rather than a generic validation error.
    """

    email: str | None = None
    password: str | None = None


class RefreshRequest(BaseModel):
    refresh_token: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    new_password: str | None = None


class PasswordChange(BaseModel):
    current_password: str | None = None
    new_password: str | None = None


class PasswordResetToken(BaseModel):
    """Stored reset token row."""

    token: str
    user_id: uuid.UUID
    expires_at: datetime


# ── Auth Responses ───────────────────────────────────────────────────────────


class AuthResponse(BaseModel):
    """Returned by register, login, and refresh."""

    user: User
    auth_token: str
    refresh_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    message: str
