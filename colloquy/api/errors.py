"""Exception handlers: translate tagged errors into client-safe responses, log the rest."""

import logging
from urllib.parse import urlencode

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from colloquy.core.errors import (
    AppError,
    InfrastructureFailure,
    RateLimited,
    Unauthenticated,
    UpstreamFailure,
    ValidationFailure,
)

logger = logging.getLogger(__name__)


def is_browser_navigation(request: Request) -> bool:
    """A top-level page load: GET that prefers HTML over JSON."""
    if request.method != "GET":
        return False
    accept = request.headers.get("accept", "")
    return "text/html" in accept and "application/json" not in accept


def signin_redirect_url(request: Request, signin_path: str) -> str:
    """Sign-in URL carrying the original destination as callbackUrl."""
    destination = request.url.path
    if request.url.query:
        destination = f"{destination}?{request.url.query}"
    return f"{signin_path}?{urlencode({'callbackUrl': destination})}"


async def app_error_handler(request: Request, exc: AppError) -> Response:
    if isinstance(exc, Unauthenticated):
        if is_browser_navigation(request):
            settings = request.app.state.settings
            return RedirectResponse(signin_redirect_url(request, settings.SIGNIN_PATH), status_code=303)
        return JSONResponse(
            exc.body(),
            status_code=exc.status_code,
            headers={"WWW-Authenticate": "Bearer"},
        )

    headers: dict[str, str] = {}
    if isinstance(exc, RateLimited):
        headers["Retry-After"] = str(exc.retry_after)
    if isinstance(exc, UpstreamFailure):
        logger.info(
            "Upstream failure returned to client",
            extra={"error_kind": exc.kind.value, "path": request.url.path},
        )
    elif isinstance(exc, InfrastructureFailure):
        logger.error("Infrastructure failure", extra={"path": request.url.path})
    return JSONResponse(exc.body(), status_code=exc.status_code, headers=headers or None)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or malformed fields → 400 with a message per field."""
    fields: dict[str, str] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        key = ".".join(loc) or "body"
        fields.setdefault(key, str(err.get("msg", "invalid value")))
    failure = ValidationFailure(fields)
    return JSONResponse(failure.body(), status_code=failure.status_code)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error", extra={"path": request.url.path})
    failure = InfrastructureFailure()
    return JSONResponse(failure.body(), status_code=failure.status_code)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception", extra={"path": request.url.path})
    failure = InfrastructureFailure()
    return JSONResponse(failure.body(), status_code=failure.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
