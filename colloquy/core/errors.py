"""Tagged application errors. Each carries its HTTP status and the client-safe message."""

from enum import Enum
from typing import Any


class AppError(Exception):
    """Base for errors that map to a client response. message is always safe to show."""

    status_code = 500
    code = "internal_error"
    default_message = "service unavailable"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def body(self) -> dict[str, Any]:
        return {"error": self.message}


class AuthenticationFailure(AppError):
    """Bad credentials at login."""

    status_code = 401
    code = "invalid_credentials"
    default_message = "invalid credentials"


class Unauthenticated(AppError):
    """Protected operation without a valid session."""

    status_code = 401
    code = "unauthenticated"
    default_message = "unauthenticated"


class AuthorizationFailure(AppError):
    """Valid session, insufficient role."""

    status_code = 403
    code = "forbidden"
    default_message = "forbidden"


class ValidationFailure(AppError):
    """Missing or invalid fields; fields maps field name to a message."""

    status_code = 400
    code = "validation_failed"
    default_message = "validation failed"

    def __init__(self, fields: dict[str, str], message: str | None = None) -> None:
        self.fields = fields
        super().__init__(message)

    def body(self) -> dict[str, Any]:
        return {"error": self.message, "fields": self.fields}


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    default_message = "not found"

    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} not found")


class Conflict(AppError):
    status_code = 409
    code = "conflict"
    default_message = "conflict"


class RateLimited(AppError):
    status_code = 429
    code = "rate_limited"
    default_message = "too many requests, please try again later"

    def __init__(self, retry_after: int, message: str | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message)


class InfrastructureFailure(AppError):
    """Store or other internal dependency unreachable. Details stay in the server log."""


class ProviderErrorKind(str, Enum):
    """Classification of upstream LLM failures, assigned where the failure is observed."""

    QUOTA_EXHAUSTED = "quota_exhausted"
    INVALID_CREDENTIAL = "invalid_credential"
    RATE_LIMITED = "rate_limited"
    CONTEXT_TOO_LONG = "context_too_long"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


UPSTREAM_MESSAGES: dict[ProviderErrorKind, str] = {
    ProviderErrorKind.QUOTA_EXHAUSTED: "The AI service quota has been used up. Please try again later.",
    ProviderErrorKind.INVALID_CREDENTIAL: "The AI service is not configured correctly. Please contact an administrator.",
    ProviderErrorKind.RATE_LIMITED: "The AI service is busy. Please wait a moment and try again.",
    ProviderErrorKind.CONTEXT_TOO_LONG: "This conversation is too long for the AI service. Please start a new conversation.",
    ProviderErrorKind.TIMEOUT: "The AI service took too long to respond. Please try again.",
    ProviderErrorKind.UNKNOWN: "The AI service is temporarily unavailable. Please try again later.",
}

UPSTREAM_STATUS: dict[ProviderErrorKind, int] = {
    ProviderErrorKind.QUOTA_EXHAUSTED: 503,
    ProviderErrorKind.INVALID_CREDENTIAL: 502,
    ProviderErrorKind.RATE_LIMITED: 429,
    ProviderErrorKind.CONTEXT_TOO_LONG: 413,
    ProviderErrorKind.TIMEOUT: 504,
    ProviderErrorKind.UNKNOWN: 502,
}


class UpstreamFailure(AppError):
    """LLM provider failure. detail is for logs only; the client sees the per-kind message."""

    def __init__(self, kind: ProviderErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        self.status_code = UPSTREAM_STATUS[kind]
        self.code = kind.value
        super().__init__(UPSTREAM_MESSAGES[kind])

    def body(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.kind.value}
