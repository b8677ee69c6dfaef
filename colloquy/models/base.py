"""SQLAlchemy declarative Base and shared column helpers."""

import uuid

from sqlalchemy.orm import DeclarativeBase


def new_id() -> str:
    """String identifiers everywhere: uuid4 hex."""
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass
