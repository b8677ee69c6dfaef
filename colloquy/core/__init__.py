"""Core app configuration, database, security and session validation."""

from colloquy.core.config import Settings, get_settings
from colloquy.core.database import get_db

__all__ = ["Settings", "get_settings", "get_db"]
