"""Login/logout/session-status/registration endpoints and admin user management."""

import time
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from colloquy.api.deps import AdminIdentity, AppSettings, get_optional_identity, get_session_tokens
from colloquy.core.config import Settings
from colloquy.core.database import get_db
from colloquy.core.errors import RateLimited
from colloquy.core.security import SESSION_MAX_AGE, SessionTokens
from colloquy.core.sessions import Identity
from colloquy.models.user import User
from colloquy.schemas.auth import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    PublicUser,
    RegisterRequest,
    RegisterResponse,
    SessionStatusResponse,
    SessionUser,
    UserListItem,
    UsersListResponse,
    UserUpdateRequest,
)
from colloquy.services.accounts import authenticate, register_user, update_user

router = APIRouter()


def _pad_to_minimum(started: float, minimum_ms: int) -> None:
    """Sleep out the rest of the minimum login duration so timing does not reveal the outcome."""
    remaining = minimum_ms / 1000 - (time.monotonic() - started)
    if remaining > 0:
        time.sleep(remaining)


def _cookie_options(settings: Settings) -> dict:
    return {
        "path": "/",
        "domain": settings.SESSION_COOKIE_DOMAIN,
        "secure": settings.APP_ENV == "prod",
        "httponly": True,
        "samesite": "lax",
    }


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=int(SESSION_MAX_AGE.total_seconds()),
        **_cookie_options(settings),
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, **_cookie_options(settings))


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    settings: AppSettings,
    tokens: Annotated[SessionTokens, Depends(get_session_tokens)],
    db: Annotated[Session, Depends(get_db)],
) -> LoginResponse:
    """
    Authenticate with email and password and set the signed session cookie.
    Failures of any kind return 401 "invalid credentials" after the same minimum delay.
    """
    started = time.monotonic()
    try:
        user = authenticate(db, body.email, body.password, request.app.state.dummy_password_hash)
    finally:
        _pad_to_minimum(started, settings.LOGIN_MIN_DURATION_MS)

    token = tokens.issue(user.id, user.role)
    set_session_cookie(response, token, settings)
    return LoginResponse(success=True, user=PublicUser.model_validate(user))


@router.post("/logout", response_model=LogoutResponse)
def logout(response: Response, settings: AppSettings) -> LogoutResponse:
    """Clear the session cookie. Safe to call without a session."""
    clear_session_cookie(response, settings)
    return LogoutResponse(success=True)


@router.get("/session", response_model=SessionStatusResponse)
def get_session_status(
    identity: Annotated[Identity | None, Depends(get_optional_identity)],
) -> SessionStatusResponse:
    """Current session status; never 401. Polled by clients to keep their view in sync."""
    if identity is None:
        return SessionStatusResponse(authenticated=False, user=None, expires=None)
    return SessionStatusResponse(
        authenticated=True,
        user=SessionUser(id=identity.id, role=identity.role),
        expires=identity.expires,
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> RegisterResponse:
    """Create an ACTIVE USER account. The client logs in separately afterwards."""
    client_ip = request.client.host if request.client else "unknown"
    allowed, retry_after = request.app.state.registration_limiter.hit(client_ip)
    if not allowed:
        raise RateLimited(retry_after, "too many registrations, please try again later")

    user = register_user(db, body.email, body.password, body.name)
    return RegisterResponse(success=True, user=PublicUser.model_validate(user))


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: AdminIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users (admin only)."""
    users = db.query(User).order_by(User.created_at, User.email).all()
    return UsersListResponse(users=[UserListItem.model_validate(u) for u in users])


@router.patch("/users/{user_id}", response_model=UserListItem)
def patch_user(
    user_id: str,
    body: UserUpdateRequest,
    _admin: AdminIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> UserListItem:
    """Change a user's role and/or status (admin only)."""
    user = update_user(db, user_id, role=body.role, status=body.status)
    return UserListItem.model_validate(user)
