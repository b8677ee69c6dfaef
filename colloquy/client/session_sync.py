"""
Client session synchronizer: one in-memory view of the current session, kept fresh by polling.

Runs on a single asyncio event loop. Refreshes are debounced, responses from
superseded requests are discarded (last request wins), subscribers hear only
real changes, and a lost session triggers at most one sign-in redirect per
cooldown window. Network failures keep the last known snapshot.
"""

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from colloquy.client.config import ClientSettings, poll_interval
from colloquy.schemas.auth import SessionStatusResponse

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class ClientIdentity:
    id: str
    role: str


@dataclass(frozen=True)
class SessionState:
    status: SessionStatus
    identity: ClientIdentity | None = None
    expires: datetime | None = None

    def change_key(self) -> tuple[SessionStatus, str | None, datetime | None]:
        """What counts as a visible change: status, subject id and expiry."""
        return (self.status, self.identity.id if self.identity else None, self.expires)


LOADING = SessionState(SessionStatus.LOADING)
SIGNED_OUT = SessionState(SessionStatus.UNAUTHENTICATED)

Listener = Callable[[SessionState], Any]


class SessionSynchronizer:
    """
    Keeps the current SessionState for an httpx.AsyncClient that carries the session cookie.

    on_signed_out receives the sign-in URL when the session is lost; listeners
    registered with subscribe() receive the new state on every visible change.
    Both are plain callables invoked on the event loop.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: ClientSettings | None = None,
        *,
        on_signed_out: Callable[[str], Any] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self.settings = settings or ClientSettings()
        self._on_signed_out = on_signed_out
        self._clock = clock
        self._state = LOADING
        self._listeners: list[Listener] = []
        self._issued = 0
        self._inflight: asyncio.Task[SessionState] | None = None
        self._last_settled_at: float | None = None
        self._last_redirect_at: float | None = None
        self._poll_task: asyncio.Task[None] | None = None
        # Where the user is now; sent as callbackUrl on redirect.
        self.current_location: str | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def auth_paths(self) -> frozenset[str]:
        """Endpoints the synchronizer calls itself; a 401 from one of them is not a lost session."""
        return frozenset({self.settings.SESSION_PATH, self.settings.LOGIN_PATH, self.settings.LOGOUT_PATH})

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def refresh(self, *, force: bool = False) -> SessionState:
        """
        Bring the snapshot up to date and return it.

        Without force, a call joins a request already in flight, or returns the
        cached state when the last result settled within DEBOUNCE_SEC.
        With force, a new request is always issued and supersedes older ones.
        """
        if not force:
            if self._inflight is not None and not self._inflight.done():
                return await asyncio.shield(self._inflight)
            if (
                self._last_settled_at is not None
                and self._clock() - self._last_settled_at < self.settings.DEBOUNCE_SEC
            ):
                return self._state

        self._issued += 1
        task = asyncio.ensure_future(self._fetch(self._issued))
        self._inflight = task
        return await asyncio.shield(task)

    async def _fetch(self, seq: int) -> SessionState:
        try:
            response = await self._client.get(
                self.settings.SESSION_PATH,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.warning("Session refresh failed; keeping last snapshot", extra={"error": repr(e)})
            return self._state

        if seq != self._issued:
            logger.debug("Discarding superseded session response", extra={"seq": seq, "latest": self._issued})
            return self._state

        if response.status_code == 401:
            self._settle()
            self._signed_out()
            return self._state

        if response.status_code != 200:
            logger.warning(
                "Session endpoint returned unexpected status; keeping last snapshot",
                extra={"status_code": response.status_code},
            )
            return self._state

        try:
            body = SessionStatusResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            logger.warning("Session endpoint returned a malformed body; keeping last snapshot")
            return self._state

        self._settle()
        if body.authenticated and body.user is not None:
            self._apply(
                SessionState(
                    SessionStatus.AUTHENTICATED,
                    identity=ClientIdentity(id=body.user.id, role=body.user.role.value),
                    expires=body.expires,
                )
            )
        else:
            self._signed_out()
        return self._state

    def report_unauthenticated(self) -> None:
        """
        A protected request came back 401. Newer than anything in flight,
        so pending refresh results are discarded.
        """
        self._issued += 1
        self._settle()
        self._signed_out()

    async def sign_in(self, email: str, password: str) -> SessionState:
        """POST credentials; on success the client's cookie jar holds the session and state is refreshed."""
        response = await self._client.post(
            self.settings.LOGIN_PATH,
            json={"email": email, "password": password},
        )
        if response.status_code != 200:
            logger.info("Sign-in rejected", extra={"status_code": response.status_code})
            return self._state
        return await self.refresh(force=True)

    async def sign_out(self) -> SessionState:
        """Clear the server session. A deliberate sign-out does not trigger the redirect callback."""
        try:
            await self._client.post(self.settings.LOGOUT_PATH)
        finally:
            self._issued += 1
            self._settle()
            self._apply(SIGNED_OUT)
        return self._state

    def signin_url(self) -> str:
        if not self.current_location:
            return self.settings.SIGNIN_PATH
        return f"{self.settings.SIGNIN_PATH}?{urlencode({'callbackUrl': self.current_location})}"

    def _settle(self) -> None:
        self._last_settled_at = self._clock()

    def _apply(self, new_state: SessionState) -> None:
        old = self._state
        self._state = new_state
        if new_state.change_key() != old.change_key():
            for listener in list(self._listeners):
                listener(new_state)

    def _signed_out(self) -> None:
        was_signed_out = self._state.status is SessionStatus.UNAUTHENTICATED
        self._apply(SIGNED_OUT)
        if was_signed_out:
            return
        now = self._clock()
        if (
            self._last_redirect_at is not None
            and now - self._last_redirect_at < self.settings.REDIRECT_COOLDOWN_SEC
        ):
            logger.debug("Sign-in redirect suppressed by cooldown")
            return
        self._last_redirect_at = now
        if self._on_signed_out is not None:
            self._on_signed_out(self.signin_url())

    def start(self) -> None:
        """Begin background polling on the running loop. Idempotent."""
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.get_running_loop().create_task(self._poll_loop())

    async def stop(self) -> None:
        task, self._poll_task = self._poll_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _poll_loop(self) -> None:
        interval = poll_interval(self.settings)
        while True:
            try:
                await self.refresh()
            except Exception:
                logger.exception("Session poll failed")
            await asyncio.sleep(interval)

    async def __aenter__(self) -> "SessionSynchronizer":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()


def build_http_client(settings: ClientSettings) -> httpx.AsyncClient:
    """AsyncClient rooted at BASE_URL; its cookie jar carries the session cookie between calls."""
    return httpx.AsyncClient(
        base_url=settings.BASE_URL,
        timeout=httpx.Timeout(settings.REQUEST_TIMEOUT_SEC),
    )
