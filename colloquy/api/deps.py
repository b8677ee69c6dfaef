"""Request-scoped dependencies: app-wide collaborators and the session identity."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from colloquy.core.config import Settings
from colloquy.core.errors import AuthorizationFailure, Unauthenticated
from colloquy.core.security import SessionTokens
from colloquy.core.sessions import Identity, Rejected, validate_session
from colloquy.services.llm import ChatCompletionClient

security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_tokens(request: Request) -> SessionTokens:
    return request.app.state.session_tokens


def get_llm_client(request: Request) -> ChatCompletionClient:
    return request.app.state.llm_client


def get_optional_identity(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Identity | None:
    """Identity from a Bearer token or the session cookie; None when absent or invalid."""
    settings: Settings = request.app.state.settings
    result = validate_session(
        request.app.state.session_tokens,
        credentials.credentials if credentials else None,
        request.cookies.get(settings.SESSION_COOKIE_NAME),
    )
    if isinstance(result, Rejected):
        return None
    return result


def get_identity(
    identity: Annotated[Identity | None, Depends(get_optional_identity)],
) -> Identity:
    """Dependency: require a valid session. Raises Unauthenticated (401 or sign-in redirect)."""
    if identity is None:
        raise Unauthenticated()
    return identity


def require_admin(
    identity: Annotated[Identity, Depends(get_identity)],
) -> Identity:
    """Dependency: require a session whose role snapshot is ADMIN. Raises 403 otherwise."""
    if not identity.is_admin:
        raise AuthorizationFailure()
    return identity


CurrentIdentity = Annotated[Identity, Depends(get_identity)]
AdminIdentity = Annotated[Identity, Depends(require_admin)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
