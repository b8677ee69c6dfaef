"""FastAPI application factory and entrypoint. No business logic; only wiring and middleware."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from colloquy.api.errors import register_exception_handlers
from colloquy.api.v1 import router as v1_router
from colloquy.core.config import Settings, get_settings
from colloquy.core.database import build_engine, build_session_factory
from colloquy.core.rate_limit import SlidingWindowLimiter
from colloquy.core.security import SessionTokens, make_dummy_hash
from colloquy.services.llm import ChatCompletionClient

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


def create_app(
    settings: Settings,
    *,
    engine: Engine | None = None,
    llm_client: ChatCompletionClient | None = None,
) -> FastAPI:
    """
    Build the application with every process-wide collaborator created up front:
    engine and session factory, session token signer, dummy password hash,
    registration limiter and upstream LLM client. Nothing is created lazily later.
    """
    engine = engine or build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Colloquy API starting", extra={"environment": settings.APP_ENV})
        yield
        engine.dispose()

    app = FastAPI(
        title="Colloquy API",
        version="0.1.0",
        docs_url="/docs" if settings.APP_ENV == "dev" else None,
        redoc_url="/redoc" if settings.APP_ENV == "dev" else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.session_tokens = SessionTokens(settings.SESSION_SECRET, settings.SESSION_ALGORITHM)
    app.state.dummy_password_hash = make_dummy_hash()
    app.state.registration_limiter = SlidingWindowLimiter(
        settings.REGISTRATION_RATE_LIMIT,
        settings.REGISTRATION_RATE_WINDOW_SEC,
    )
    app.state.llm_client = llm_client or ChatCompletionClient(settings)
    if not settings.llm_configured:
        logger.warning("LLM_API_KEY is not set; chat requests will fail as invalid_credential")

    # Credentials (the session cookie) cannot be combined with a wildcard origin.
    origins = settings.CORS_ORIGINS or (["http://localhost:3000"] if settings.APP_ENV == "dev" else [])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Colloquy API"}

    return app


def build_app() -> FastAPI:
    """
    Load .env, read settings and build the app. A missing SESSION_SECRET raises here, at startup.

    Run with: uvicorn colloquy.main:build_app --factory
    """
    load_dotenv()
    settings = get_settings()
    configure_logging(settings)
    return create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("colloquy.main:build_app", factory=True, host="0.0.0.0", port=8000)
