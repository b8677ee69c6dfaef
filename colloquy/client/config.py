"""Client-side settings for the session synchronizer, loaded from COLLOQUY_CLIENT_* variables."""

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Polling below this would turn every client into a request storm.
MIN_POLL_INTERVAL_SEC = 5.0

# Default polling cadence by environment and device class (seconds).
DEV_POLL_INTERVAL_SEC = 600.0
MOBILE_POLL_INTERVAL_SEC = 900.0
DESKTOP_POLL_INTERVAL_SEC = 300.0


class ClientSettings(BaseSettings):
    """Validated settings for an API client that keeps a session view in sync."""

    model_config = SettingsConfigDict(
        env_prefix="COLLOQUY_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    BASE_URL: str = "http://localhost:8000"
    SESSION_PATH: str = "/api/v1/auth/session"
    LOGIN_PATH: str = "/api/v1/auth/login"
    LOGOUT_PATH: str = "/api/v1/auth/logout"
    SIGNIN_PATH: str = "/auth/signin"

    ENVIRONMENT: Literal["dev", "prod"] = "prod"
    DEVICE_CLASS: Literal["desktop", "mobile"] = "desktop"
    # Overrides the environment/device default when set.
    POLL_INTERVAL_SEC: float | None = None

    DEBOUNCE_SEC: float = 2.0
    REDIRECT_COOLDOWN_SEC: float = 3.0
    REQUEST_TIMEOUT_SEC: float = 10.0

    @field_validator("BASE_URL")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        s = v.strip().lower()
        if not (s.startswith("http://") or s.startswith("https://")):
            raise ValueError("BASE_URL must use http or https (e.g. http://localhost:8000)")
        return v.strip().rstrip("/")

    @field_validator("SESSION_PATH", "LOGIN_PATH", "LOGOUT_PATH", "SIGNIN_PATH")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("paths must start with '/'")
        return v

    @field_validator("POLL_INTERVAL_SEC")
    @classmethod
    def validate_poll_interval(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("POLL_INTERVAL_SEC must be greater than 0")
        return v

    @field_validator("DEBOUNCE_SEC", "REDIRECT_COOLDOWN_SEC")
    @classmethod
    def validate_window(cls, v: float) -> float:
        if v < 0 or v > 60:
            raise ValueError("debounce and cooldown windows must be between 0 and 60 seconds")
        return v

    @field_validator("REQUEST_TIMEOUT_SEC")
    @classmethod
    def validate_request_timeout(cls, v: float) -> float:
        if v <= 0 or v > 120:
            raise ValueError("REQUEST_TIMEOUT_SEC must be greater than 0 and at most 120")
        return v


def poll_interval(settings: ClientSettings) -> float:
    """Polling interval for this client, never below MIN_POLL_INTERVAL_SEC."""
    if settings.POLL_INTERVAL_SEC is not None:
        interval = settings.POLL_INTERVAL_SEC
    elif settings.ENVIRONMENT == "dev":
        interval = DEV_POLL_INTERVAL_SEC
    elif settings.DEVICE_CLASS == "mobile":
        interval = MOBILE_POLL_INTERVAL_SEC
    else:
        interval = DESKTOP_POLL_INTERVAL_SEC
    return max(interval, MIN_POLL_INTERVAL_SEC)
