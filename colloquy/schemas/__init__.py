"""Pydantic request/response schemas."""

from colloquy.schemas.auth import (
    LoginRequest,
    LoginResponse,
    PublicUser,
    RegisterRequest,
    SessionStatusResponse,
)
from colloquy.schemas.chat import ChatRequest, ChatResponse, ConversationDetail
from colloquy.schemas.dashboard import DashboardStats
from colloquy.schemas.health import HealthResponse
from colloquy.schemas.knowledge import KnowledgeCreate, KnowledgeOut
from colloquy.schemas.projects import ProjectCreate, ProjectOut

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ConversationDetail",
    "DashboardStats",
    "HealthResponse",
    "KnowledgeCreate",
    "KnowledgeOut",
    "LoginRequest",
    "LoginResponse",
    "ProjectCreate",
    "ProjectOut",
    "PublicUser",
    "RegisterRequest",
    "SessionStatusResponse",
]
