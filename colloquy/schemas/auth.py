"""Request/response schemas for auth endpoints."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from colloquy.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    normalize_email,
)
from colloquy.models.user import UserRole, UserStatus

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NAME_PATTERN = re.compile(r"^[\w\- ]+$")


class LoginRequest(BaseModel):
    """Credentials for login. Length policy is not enforced here so bad input still costs a full check."""

    email: str = Field(..., min_length=1, description="Account email")
    password: str = Field(..., min_length=1, description="Password")


class RegisterRequest(BaseModel):
    """New account details."""

    email: str = Field(..., min_length=3, max_length=EMAIL_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = normalize_email(v)
        if not EMAIL_PATTERN.match(v):
            raise ValueError("must be a valid email address")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < NAME_MIN_LEN:
            raise ValueError(f"must be at least {NAME_MIN_LEN} characters")
        if not NAME_PATTERN.match(v):
            raise ValueError("may contain letters, digits, spaces, underscores and hyphens only")
        return v


class PublicUser(BaseModel):
    """User fields safe to return to clients (never the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: UserRole


class LoginResponse(BaseModel):
    success: bool = True
    user: PublicUser


class LogoutResponse(BaseModel):
    success: bool = True


class RegisterResponse(BaseModel):
    success: bool = True
    user: PublicUser


class SessionUser(BaseModel):
    """Identity as carried by the session token: id and role snapshot."""

    id: str
    role: UserRole


class SessionStatusResponse(BaseModel):
    """Response for GET /auth/session; polled by the client session synchronizer."""

    authenticated: bool
    user: SessionUser | None = None
    expires: datetime | None = None


class UserListItem(BaseModel):
    """User entry for admin list (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: UserRole
    status: UserStatus
    created_at: datetime | None = None
    last_login_at: datetime | None = None


class UsersListResponse(BaseModel):
    """Response for GET /auth/users (admin only)."""

    users: list[UserListItem]


class UserUpdateRequest(BaseModel):
    """Admin change of role and/or status."""

    role: UserRole | None = None
    status: UserStatus | None = None
