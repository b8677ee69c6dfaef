"""Password hashing and signed session token issuing/decoding."""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt
from pydantic import SecretStr

# Bcrypt cost (rounds); fixed work factor for every stored hash.
BCRYPT_ROUNDS = 12

# Sessions live for a fixed 30 days; refresh happens by logging in again.
SESSION_MAX_AGE = timedelta(days=30)

# Min/max lengths for registration input validation.
EMAIL_MAX_LEN = 255
NAME_MIN_LEN = 2
NAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

REQUIRED_CLAIMS = ["sub", "role", "iat", "exp"]


def normalize_email(email: str) -> str:
    """Lowercase and strip an email before lookup or storage."""
    return email.strip().lower()


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash. Malformed hashes never match."""
    if not hashed:
        return False
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def make_dummy_hash() -> str:
    """Hash a random throwaway password; compared against when the email is unknown."""
    return hash_password(secrets.token_urlsafe(32))


class SessionTokens:
    """Issues and decodes signed session tokens with a process-wide secret."""

    def __init__(self, secret: SecretStr, algorithm: str = "HS256") -> None:
        if not secret.get_secret_value().strip():
            raise ValueError("Session signing secret must be non-empty")
        self._secret = secret
        self.algorithm = algorithm

    def issue(self, user_id: str, role: str, now: datetime | None = None) -> str:
        """Create a token carrying only sub (user id), role, iat and exp."""
        issued_at = now or datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "role": role,
            "iat": issued_at,
            "exp": issued_at + SESSION_MAX_AGE,
        }
        return jwt.encode(
            payload,
            self._secret.get_secret_value(),
            algorithm=self.algorithm,
        )

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify signature and expiry; return payload (sub, role, iat, exp).
        Raises jwt.PyJWTError on invalid or expired token.
        """
        return jwt.decode(
            token,
            self._secret.get_secret_value(),
            algorithms=[self.algorithm],
            options={"require": REQUIRED_CLAIMS},
        )
