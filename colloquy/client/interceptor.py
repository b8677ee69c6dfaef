"""httpx response hook that reports 401s on protected calls to a SessionSynchronizer."""

import httpx

from colloquy.client.session_sync import SessionSynchronizer


class UnauthenticatedInterceptor:
    """
    Installed on one httpx.AsyncClient at a time. install() appends a response
    hook; uninstall() removes exactly that hook and leaves others in place.
    """

    def __init__(self, synchronizer: SessionSynchronizer) -> None:
        self._synchronizer = synchronizer
        self._client: httpx.AsyncClient | None = None

    @property
    def installed(self) -> bool:
        return self._client is not None

    async def _on_response(self, response: httpx.Response) -> None:
        if response.status_code != 401:
            return
        # A rejected sign-in or a status check is handled by the synchronizer.
        if response.request.url.path in self._synchronizer.auth_paths:
            return
        self._synchronizer.report_unauthenticated()

    def install(self, client: httpx.AsyncClient) -> None:
        if self._client is not None:
            raise RuntimeError("interceptor is already installed on a client")
        hooks = client.event_hooks
        hooks["response"] = [*hooks.get("response", []), self._on_response]
        client.event_hooks = hooks
        self._client = client

    def uninstall(self) -> None:
        if self._client is None:
            return
        hooks = self._client.event_hooks
        hooks["response"] = [h for h in hooks.get("response", []) if h != self._on_response]
        self._client.event_hooks = hooks
        self._client = None
