"""SQLAlchemy ORM models."""

from colloquy.models.base import Base
from colloquy.models.conversation import Conversation, Message
from colloquy.models.knowledge import KnowledgeItem
from colloquy.models.project import Project, ProjectStatus
from colloquy.models.user import User, UserRole, UserStatus

__all__ = [
    "Base",
    "Conversation",
    "KnowledgeItem",
    "Message",
    "Project",
    "ProjectStatus",
    "User",
    "UserRole",
    "UserStatus",
]
