"""Account operations: credential check, registration and admin updates against the users table."""

import logging
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from colloquy.core.errors import AuthenticationFailure, Conflict, NotFound
from colloquy.core.security import hash_password, normalize_email, verify_password
from colloquy.models.user import User, UserRole, UserStatus

logger = logging.getLogger(__name__)


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def authenticate(db: Session, email: str, password: str, dummy_hash: str) -> User:
    """
    Return the ACTIVE user matching email and password, or raise AuthenticationFailure.

    An unknown email is still compared against dummy_hash so every path costs one bcrypt check.
    Unknown email, wrong password and inactive account are indistinguishable to the caller.
    """
    user = find_user_by_email(db, email)
    if user is None:
        verify_password(password, dummy_hash)
        logger.info("Login failed", extra={"reason": "unknown_email"})
        raise AuthenticationFailure()
    if not verify_password(password, user.password_hash):
        logger.info("Login failed", extra={"reason": "bad_password", "user_id": user.id})
        raise AuthenticationFailure()
    if not user.is_active:
        logger.info("Login failed", extra={"reason": "inactive", "user_id": user.id})
        raise AuthenticationFailure()

    user.last_login_at = datetime.now(UTC)
    db.commit()
    return user


def register_user(
    db: Session,
    email: str,
    password: str,
    name: str,
    role: UserRole = UserRole.USER,
) -> User:
    """Create an ACTIVE account. Raises Conflict when the email is taken."""
    normalized = normalize_email(email)
    if find_user_by_email(db, normalized) is not None:
        raise Conflict("email already registered")

    user = User(
        email=normalized,
        password_hash=hash_password(password),
        name=name.strip(),
        role=role.value,
        status=UserStatus.ACTIVE.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Concurrent registration of the same email won the unique index.
        db.rollback()
        raise Conflict("email already registered") from e
    db.refresh(user)
    logger.info("User registered", extra={"user_id": user.id})
    return user


def update_user(
    db: Session,
    user_id: str,
    role: UserRole | None = None,
    status: UserStatus | None = None,
) -> User:
    """Change role and/or status. Existing sessions keep their role snapshot until they expire."""
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFound("user")
    if role is not None:
        user.role = role.value
    if status is not None:
        user.status = status.value
    db.commit()
    db.refresh(user)
    logger.info(
        "User updated",
        extra={"user_id": user.id, "role": user.role, "status": user.status},
    )
    return user
