"""ORM model for application users (credentials, role and account status)."""

from enum import Enum

from sqlalchemy import Column, DateTime, String, func

from colloquy.models.base import Base, new_id


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    DISABLED = "DISABLED"
    PENDING = "PENDING"


class User(Base):
    """
    User account for session authentication and role-based access control.

    email is stored lowercase; password_hash never leaves the server.
    """

    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(50), nullable=False)
    role = Column(String(16), nullable=False, default=UserRole.USER.value)
    status = Column(String(16), nullable=False, default=UserStatus.ACTIVE.value)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value
