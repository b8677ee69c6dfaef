"""Async client helpers: session synchronizer and 401 interceptor for httpx."""

from colloquy.client.config import ClientSettings, poll_interval
from colloquy.client.interceptor import UnauthenticatedInterceptor
from colloquy.client.session_sync import (
    ClientIdentity,
    SessionState,
    SessionStatus,
    SessionSynchronizer,
    build_http_client,
)

__all__ = [
    "ClientIdentity",
    "ClientSettings",
    "SessionState",
    "SessionStatus",
    "SessionSynchronizer",
    "UnauthenticatedInterceptor",
    "build_http_client",
    "poll_interval",
]
