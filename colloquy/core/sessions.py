"""Session validation: turn request credentials into an Identity or a Rejected outcome."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

import jwt

from colloquy.core.security import SessionTokens
from colloquy.models.user import UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Authenticated subject derived from a valid session token."""

    id: str
    role: UserRole
    expires: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


class RejectReason(str, Enum):
    MISSING = "missing"
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"
    INVALID_CLAIMS = "invalid_claims"


@dataclass(frozen=True)
class Rejected:
    """Validation failure. reason is for server logs; callers must not expose it."""

    reason: RejectReason


def _reject(reason: RejectReason) -> Rejected:
    logger.info("Session rejected", extra={"reason": reason.value})
    return Rejected(reason)


def validate_session(
    tokens: SessionTokens,
    bearer: str | None,
    cookie: str | None,
) -> Identity | Rejected:
    """Verify signature, then expiry, then claims. A bearer token takes precedence over the cookie."""
    token = (bearer or "").strip() or (cookie or "").strip()
    if not token:
        return _reject(RejectReason.MISSING)

    try:
        payload = tokens.decode(token)
    except jwt.ExpiredSignatureError:
        return _reject(RejectReason.EXPIRED)
    except jwt.InvalidSignatureError:
        return _reject(RejectReason.BAD_SIGNATURE)
    except jwt.MissingRequiredClaimError:
        return _reject(RejectReason.INVALID_CLAIMS)
    except jwt.PyJWTError:
        return _reject(RejectReason.MALFORMED)

    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub.strip():
        return _reject(RejectReason.INVALID_CLAIMS)
    try:
        role = UserRole(payload.get("role"))
    except ValueError:
        return _reject(RejectReason.INVALID_CLAIMS)

    exp = payload.get("exp")
    expires = datetime.fromtimestamp(exp, UTC) if isinstance(exp, (int, float)) else None
    return Identity(id=sub, role=role, expires=expires)
