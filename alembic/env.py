"""
Migration runner for the colloquy schema.

The target database is colloquy.core.config.Settings.DATABASE_URL, read from the
environment or .env. Settings refuses to load without SESSION_SECRET, so that
variable must be present even though migrations never use it.
"""

import os
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

load_dotenv()
os.environ.setdefault("APP_ENV", "dev")
from colloquy.core.config import get_settings
from colloquy.models import Base

# Registers users, conversations, messages, projects and knowledge_items on Base.metadata.
from colloquy.models import Conversation, KnowledgeItem, Message, Project, User  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def database_url() -> str:
    """DATABASE_URL as validated by Settings (PostgreSQL URLs only)."""
    return get_settings().DATABASE_URL


def run_offline() -> None:
    """Emit the migration SQL to stdout instead of executing it."""
    context.configure(
        url=database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = create_engine(database_url(), poolclass=NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
