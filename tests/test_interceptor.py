"""Response-hook interceptor: explicit install/uninstall and 401 reporting."""

import asyncio
import os
import unittest
from unittest.mock import MagicMock, patch

import httpx

from colloquy.client.config import ClientSettings
from colloquy.client.interceptor import UnauthenticatedInterceptor
from colloquy.client.session_sync import SessionStatus, SessionSynchronizer

SESSION_PATH = "/api/v1/auth/session"
LOGIN_PATH = "/api/v1/auth/login"
LOGOUT_PATH = "/api/v1/auth/logout"


def _client() -> httpx.AsyncClient:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/v1/public":
            return httpx.Response(200, json={})
        return httpx.Response(401, json={"error": "unauthenticated"})

    return httpx.AsyncClient(base_url="http://testserver", transport=httpx.MockTransport(handler))


def _synchronizer() -> MagicMock:
    sync = MagicMock()
    sync.auth_paths = frozenset({SESSION_PATH, LOGIN_PATH, LOGOUT_PATH})
    return sync


class TestUnauthenticatedInterceptor(unittest.TestCase):
    def test_reports_401_on_protected_call(self) -> None:
        async def scenario() -> None:
            sync = _synchronizer()
            client = _client()
            interceptor = UnauthenticatedInterceptor(sync)
            interceptor.install(client)

            await client.get("/api/v1/public")
            sync.report_unauthenticated.assert_not_called()

            await client.get("/api/v1/projects")
            sync.report_unauthenticated.assert_called_once_with()
            await client.aclose()

        asyncio.run(scenario())

    def test_session_endpoint_401_is_left_to_synchronizer(self) -> None:
        async def scenario() -> None:
            sync = _synchronizer()
            client = _client()
            UnauthenticatedInterceptor(sync).install(client)
            await client.get(SESSION_PATH)
            sync.report_unauthenticated.assert_not_called()
            await client.aclose()

        asyncio.run(scenario())

    def test_sign_in_and_sign_out_401s_are_not_reported(self) -> None:
        async def scenario() -> None:
            sync = _synchronizer()
            client = _client()
            UnauthenticatedInterceptor(sync).install(client)
            await client.post(LOGIN_PATH, json={"email": "a@example.com", "password": "wrong"})
            await client.post(LOGOUT_PATH)
            sync.report_unauthenticated.assert_not_called()
            await client.aclose()

        asyncio.run(scenario())

    def test_rejected_sign_in_does_not_redirect(self) -> None:
        async def scenario() -> None:
            env = {k: v for k, v in os.environ.items() if not k.upper().startswith("COLLOQUY_CLIENT_")}
            with patch.dict(os.environ, env, clear=True):
                settings = ClientSettings(_env_file=None)
            client = _client()
            redirects: list[str] = []
            sync = SessionSynchronizer(client, settings, on_signed_out=redirects.append)
            UnauthenticatedInterceptor(sync).install(client)

            await sync.sign_in("a@example.com", "wrong-password")
            self.assertEqual(redirects, [])
            self.assertIsNot(sync.state.status, SessionStatus.UNAUTHENTICATED)

            await client.get("/api/v1/projects")
            self.assertEqual(redirects, [settings.SIGNIN_PATH])
            self.assertIs(sync.state.status, SessionStatus.UNAUTHENTICATED)
            await client.aclose()

        asyncio.run(scenario())

    def test_uninstall_removes_only_own_hook(self) -> None:
        async def scenario() -> None:
            sync = _synchronizer()
            seen: list[int] = []

            async def other_hook(response: httpx.Response) -> None:
                seen.append(response.status_code)

            client = _client()
            client.event_hooks = {"response": [other_hook]}
            interceptor = UnauthenticatedInterceptor(sync)
            interceptor.install(client)
            self.assertTrue(interceptor.installed)
            self.assertEqual(len(client.event_hooks["response"]), 2)

            interceptor.uninstall()
            self.assertFalse(interceptor.installed)
            self.assertEqual(client.event_hooks["response"], [other_hook])

            await client.get("/api/v1/projects")
            sync.report_unauthenticated.assert_not_called()
            self.assertEqual(seen, [401])
            await client.aclose()

        asyncio.run(scenario())

    def test_double_install_rejected(self) -> None:
        interceptor = UnauthenticatedInterceptor(_synchronizer())
        client = _client()
        interceptor.install(client)
        with self.assertRaises(RuntimeError):
            interceptor.install(client)
        interceptor.uninstall()
        interceptor.uninstall()
        self.assertFalse(interceptor.installed)

    def test_reinstall_after_uninstall(self) -> None:
        interceptor = UnauthenticatedInterceptor(_synchronizer())
        client = _client()
        interceptor.install(client)
        interceptor.uninstall()
        interceptor.install(client)
        self.assertEqual(len(client.event_hooks["response"]), 1)


if __name__ == "__main__":
    unittest.main()
