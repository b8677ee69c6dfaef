"""Upstream LLM client: OpenAI-compatible chat completions over httpx, with failures classified at the source."""

import json
import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from colloquy.core.errors import ProviderErrorKind

if TYPE_CHECKING:
    from colloquy.core.config import Settings

logger = logging.getLogger(__name__)

# Provider error codes/types that identify a failure class regardless of HTTP status.
QUOTA_ERROR_CODES = frozenset({"insufficient_quota", "insufficient_balance", "billing_hard_limit_reached"})
CONTEXT_ERROR_CODES = frozenset({"context_length_exceeded", "string_above_max_length"})
AUTH_ERROR_CODES = frozenset({"invalid_api_key", "authentication_error"})


class ProviderError(Exception):
    """Raised when the completion call fails. kind is set where the failure is observed."""

    def __init__(self, kind: ProviderErrorKind, detail: str, cause: Exception | None = None) -> None:
        self.kind = kind
        self.detail = detail
        self.cause = cause
        super().__init__(f"{kind.value}: {detail}")


def _error_code(body: Any) -> str | None:
    """Extract error.code (or error.type) from an OpenAI-style error body."""
    if not isinstance(body, dict):
        return None
    err = body.get("error")
    if not isinstance(err, dict):
        return None
    code = err.get("code") or err.get("type")
    return str(code) if code else None


def classify_response(status_code: int, body: Any) -> ProviderErrorKind:
    """Map a non-2xx provider response to a ProviderErrorKind using status and error code."""
    code = _error_code(body)
    if code in QUOTA_ERROR_CODES or status_code == 402:
        return ProviderErrorKind.QUOTA_EXHAUSTED
    if code in CONTEXT_ERROR_CODES or status_code == 413:
        return ProviderErrorKind.CONTEXT_TOO_LONG
    if code in AUTH_ERROR_CODES or status_code in (401, 403):
        return ProviderErrorKind.INVALID_CREDENTIAL
    if status_code == 429:
        return ProviderErrorKind.RATE_LIMITED
    if status_code in (408, 504):
        return ProviderErrorKind.TIMEOUT
    return ProviderErrorKind.UNKNOWN


class ChatCompletionClient:
    """
    Calls {LLM_BASE_URL}/chat/completions with a bounded timeout and no automatic retry.

    Built once at startup; the API key is read from settings then and never re-read.
    transport is for tests (httpx.MockTransport).
    """

    def __init__(
        self,
        settings: "Settings",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = settings.LLM_BASE_URL.rstrip("/")
        self.model = settings.LLM_MODEL
        self.temperature = settings.LLM_TEMPERATURE
        self.max_tokens = settings.LLM_MAX_TOKENS
        self.timeout = httpx.Timeout(settings.LLM_REQUEST_TIMEOUT_SEC)
        self._api_key = (
            settings.LLM_API_KEY.get_secret_value().strip() if settings.llm_configured else None
        )
        self._transport = transport

    def _log_failure(self, elapsed: float, kind: ProviderErrorKind, message_count: int) -> None:
        logger.info(
            "LLM completion request failed",
            extra={
                "llm_latency_seconds": elapsed,
                "message_count": message_count,
                "model": self.model,
                "status": "error",
                "error_kind": kind.value,
            },
        )

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """
        Send role-tagged messages and return the assistant reply text.
        temperature and max_tokens override the configured defaults for this call.

        Raises ProviderError on missing key, transport failure, timeout, non-200 status,
        or a body without reply content.
        """
        if self._api_key is None:
            raise ProviderError(ProviderErrorKind.INVALID_CREDENTIAL, "LLM_API_KEY is not configured")

        url = f"{self.base_url}/chat/completions"
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature if temperature is None else temperature,
            "max_tokens": self.max_tokens if max_tokens is None else max_tokens,
            "stream": False,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}
        start = time.perf_counter()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=headers)
            elapsed = time.perf_counter() - start
        except httpx.TimeoutException as e:
            self._log_failure(time.perf_counter() - start, ProviderErrorKind.TIMEOUT, len(messages))
            raise ProviderError(ProviderErrorKind.TIMEOUT, "LLM request timed out", cause=e) from e
        except httpx.HTTPError as e:
            self._log_failure(time.perf_counter() - start, ProviderErrorKind.UNKNOWN, len(messages))
            raise ProviderError(ProviderErrorKind.UNKNOWN, f"LLM request failed: {e!r}", cause=e) from e

        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = None

        if response.status_code != 200:
            kind = classify_response(response.status_code, body)
            self._log_failure(elapsed, kind, len(messages))
            raise ProviderError(
                kind,
                f"LLM returned status {response.status_code} (code={_error_code(body)})",
            )

        if not isinstance(body, dict):
            raise ProviderError(ProviderErrorKind.UNKNOWN, "LLM response body is not a JSON object")

        log_extra: dict[str, float | int | str | None] = {
            "llm_latency_seconds": elapsed,
            "message_count": len(messages),
            "model": body.get("model") or self.model,
        }
        usage = body.get("usage")
        if isinstance(usage, dict) and usage.get("total_tokens") is not None:
            log_extra["total_tokens"] = usage["total_tokens"]
        logger.info("LLM completion request completed", extra=log_extra)

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                ProviderErrorKind.UNKNOWN,
                "LLM response missing choices[0].message.content",
                cause=e,
            ) from e

        if not isinstance(content, str) or not content.strip():
            # A length-truncated empty reply means the prompt filled the window.
            finish_reason = body["choices"][0].get("finish_reason")
            if finish_reason == "length":
                raise ProviderError(ProviderErrorKind.CONTEXT_TOO_LONG, "LLM returned empty reply (length)")
            raise ProviderError(ProviderErrorKind.UNKNOWN, "LLM returned an empty reply")
        return content.strip()
