"""Login, logout, session status, registration and admin user endpoints through the app factory."""

import time
import unittest

from fastapi.testclient import TestClient

from colloquy.core.sessions import Identity, validate_session
from support import TEST_PASSWORD, add_user, bearer_for, build_test_app, make_settings

AUTH = "/api/v1/auth"


class TestLogin(unittest.TestCase):
    """POST /auth/login: uniform 401 on any failure, signed cookie on success."""

    def setUp(self) -> None:
        self.app, _ = build_test_app()
        self.client = TestClient(self.app)
        self.user = add_user(self.app, email="alice@example.com")

    def test_success_sets_cookie_for_user(self) -> None:
        resp = self.client.post(f"{AUTH}/login", json={"email": "alice@example.com", "password": TEST_PASSWORD})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["user"]["id"], self.user.id)
        self.assertNotIn("password_hash", body["user"])

        cookie = resp.cookies.get(self.app.state.settings.SESSION_COOKIE_NAME)
        self.assertIsNotNone(cookie)
        identity = validate_session(self.app.state.session_tokens, None, cookie)
        self.assertIsInstance(identity, Identity)
        self.assertEqual(identity.id, self.user.id)

        set_cookie = resp.headers["set-cookie"].lower()
        self.assertIn("httponly", set_cookie)
        self.assertIn("samesite=lax", set_cookie)
        self.assertIn("path=/", set_cookie)

    def test_email_is_case_insensitive(self) -> None:
        resp = self.client.post(f"{AUTH}/login", json={"email": " ALICE@example.com ", "password": TEST_PASSWORD})
        self.assertEqual(resp.status_code, 200)

    def test_failures_are_indistinguishable(self) -> None:
        add_user(self.app, email="disabled@example.com", status="DISABLED")
        attempts = [
            {"email": "alice@example.com", "password": "wrong-password"},
            {"email": "nobody@example.com", "password": TEST_PASSWORD},
            {"email": "disabled@example.com", "password": TEST_PASSWORD},
        ]
        for payload in attempts:
            resp = self.client.post(f"{AUTH}/login", json=payload)
            self.assertEqual(resp.status_code, 401, payload)
            self.assertEqual(resp.json(), {"error": "invalid credentials"})
            self.assertNotIn("set-cookie", resp.headers)

    def test_overlong_credentials_are_invalid_not_malformed(self) -> None:
        attempts = [
            {"email": "alice@example.com", "password": "x" * 129},
            {"email": "alice@example.com", "password": "x" * 5000},
            {"email": "a" * 300 + "@example.com", "password": TEST_PASSWORD},
        ]
        for payload in attempts:
            resp = self.client.post(f"{AUTH}/login", json=payload)
            self.assertEqual(resp.status_code, 401)
            self.assertEqual(resp.json(), {"error": "invalid credentials"})

    def test_missing_fields_is_validation_failure(self) -> None:
        resp = self.client.post(f"{AUTH}/login", json={"email": "alice@example.com"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("password", resp.json()["fields"])

    def test_login_records_last_login(self) -> None:
        self.client.post(f"{AUTH}/login", json={"email": "alice@example.com", "password": TEST_PASSWORD})
        admin = add_user(self.app, email="admin@example.com", role="ADMIN")
        resp = self.client.get(f"{AUTH}/users", headers=bearer_for(self.app, admin))
        alice = next(u for u in resp.json()["users"] if u["email"] == "alice@example.com")
        self.assertIsNotNone(alice["last_login_at"])


class TestLoginMinimumDuration(unittest.TestCase):
    def test_every_attempt_takes_at_least_the_minimum(self) -> None:
        app, _ = build_test_app(make_settings(LOGIN_MIN_DURATION_MS=200))
        add_user(app, email="bob@example.com")
        client = TestClient(app)
        for payload in (
            {"email": "bob@example.com", "password": TEST_PASSWORD},
            {"email": "bob@example.com", "password": "nope-nope"},
            {"email": "ghost@example.com", "password": "nope-nope"},
            {"email": "bob@example.com", "password": "y" * 200},
        ):
            started = time.monotonic()
            client.post(f"{AUTH}/login", json=payload)
            self.assertGreaterEqual(time.monotonic() - started, 0.2)


class TestSessionAndLogout(unittest.TestCase):
    def setUp(self) -> None:
        self.app, _ = build_test_app()
        self.client = TestClient(self.app)
        self.user = add_user(self.app, email="carol@example.com")

    def test_session_without_cookie_is_not_an_error(self) -> None:
        resp = self.client.get(f"{AUTH}/session")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"authenticated": False, "user": None, "expires": None})

    def test_session_after_login_then_logout(self) -> None:
        self.client.post(f"{AUTH}/login", json={"email": "carol@example.com", "password": TEST_PASSWORD})
        resp = self.client.get(f"{AUTH}/session")
        body = resp.json()
        self.assertTrue(body["authenticated"])
        self.assertEqual(body["user"], {"id": self.user.id, "role": "USER"})
        self.assertIsNotNone(body["expires"])

        resp = self.client.post(f"{AUTH}/logout")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"success": True})
        self.assertFalse(self.client.get(f"{AUTH}/session").json()["authenticated"])

    def test_bearer_token_is_accepted(self) -> None:
        resp = self.client.get(f"{AUTH}/session", headers=bearer_for(self.app, self.user))
        self.assertTrue(resp.json()["authenticated"])

    def test_tampered_token_is_unauthenticated(self) -> None:
        headers = bearer_for(self.app, self.user)
        headers["Authorization"] += "x"
        self.assertFalse(self.client.get(f"{AUTH}/session", headers=headers).json()["authenticated"])


class TestRegister(unittest.TestCase):
    """POST /auth/register: normalized email, field errors, duplicates and per-IP throttling."""

    def setUp(self) -> None:
        self.app, _ = build_test_app(make_settings(REGISTRATION_RATE_LIMIT=2))
        self.client = TestClient(self.app)

    def test_creates_active_user_that_can_log_in(self) -> None:
        resp = self.client.post(
            f"{AUTH}/register",
            json={"email": " Dave@Example.com", "password": "long-enough-pw", "name": "Dave"},
        )
        self.assertEqual(resp.status_code, 201)
        user = resp.json()["user"]
        self.assertEqual(user["email"], "dave@example.com")
        self.assertEqual(user["role"], "USER")

        resp = self.client.post(f"{AUTH}/login", json={"email": "dave@example.com", "password": "long-enough-pw"})
        self.assertEqual(resp.status_code, 200)

    def test_duplicate_email_conflicts(self) -> None:
        add_user(self.app, email="erin@example.com")
        resp = self.client.post(
            f"{AUTH}/register",
            json={"email": "ERIN@example.com", "password": "long-enough-pw", "name": "Erin"},
        )
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json(), {"error": "email already registered"})

    def test_invalid_fields_reported_per_field(self) -> None:
        resp = self.client.post(
            f"{AUTH}/register",
            json={"email": "not-an-email", "password": "short", "name": "x"},
        )
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["error"], "validation failed")
        self.assertEqual(set(body["fields"]), {"email", "password", "name"})

    def test_rate_limited_per_client(self) -> None:
        for i in range(2):
            resp = self.client.post(
                f"{AUTH}/register",
                json={"email": f"user{i}@example.com", "password": "long-enough-pw", "name": f"User {i}"},
            )
            self.assertEqual(resp.status_code, 201)
        resp = self.client.post(
            f"{AUTH}/register",
            json={"email": "user9@example.com", "password": "long-enough-pw", "name": "User 9"},
        )
        self.assertEqual(resp.status_code, 429)
        self.assertIn("retry-after", resp.headers)


class TestAdminUsers(unittest.TestCase):
    def setUp(self) -> None:
        self.app, _ = build_test_app()
        self.client = TestClient(self.app)
        self.user = add_user(self.app, email="frank@example.com")
        self.admin = add_user(self.app, email="root@example.com", role="ADMIN")

    def test_non_admin_is_forbidden(self) -> None:
        resp = self.client.get(f"{AUTH}/users", headers=bearer_for(self.app, self.user))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json(), {"error": "forbidden"})

    def test_anonymous_is_unauthenticated(self) -> None:
        resp = self.client.get(f"{AUTH}/users")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "unauthenticated"})
        self.assertEqual(resp.headers["www-authenticate"], "Bearer")

    def test_admin_lists_users_without_hashes(self) -> None:
        resp = self.client.get(f"{AUTH}/users", headers=bearer_for(self.app, self.admin))
        self.assertEqual(resp.status_code, 200)
        users = resp.json()["users"]
        self.assertEqual({u["email"] for u in users}, {"frank@example.com", "root@example.com"})
        self.assertTrue(all("password_hash" not in u for u in users))

    def test_admin_disables_user_and_login_then_fails(self) -> None:
        resp = self.client.patch(
            f"{AUTH}/users/{self.user.id}",
            json={"status": "DISABLED"},
            headers=bearer_for(self.app, self.admin),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "DISABLED")

        resp = self.client.post(f"{AUTH}/login", json={"email": "frank@example.com", "password": TEST_PASSWORD})
        self.assertEqual(resp.status_code, 401)

    def test_patch_unknown_user(self) -> None:
        resp = self.client.patch(
            f"{AUTH}/users/doesnotexist",
            json={"role": "ADMIN"},
            headers=bearer_for(self.app, self.admin),
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "user not found"})


class TestBrowserNavigation(unittest.TestCase):
    """Unauthenticated page loads redirect to sign-in; API calls get JSON 401."""

    def setUp(self) -> None:
        self.app, _ = build_test_app()
        self.client = TestClient(self.app)

    def test_html_get_redirects_with_callback(self) -> None:
        resp = self.client.get(
            "/api/v1/conversations?limit=5",
            headers={"Accept": "text/html,application/xhtml+xml"},
            follow_redirects=False,
        )
        self.assertEqual(resp.status_code, 303)
        self.assertEqual(
            resp.headers["location"],
            "/auth/signin?callbackUrl=%2Fapi%2Fv1%2Fconversations%3Flimit%3D5",
        )

    def test_json_get_is_401(self) -> None:
        resp = self.client.get("/api/v1/conversations", headers={"Accept": "application/json"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "unauthenticated"})


class TestHealth(unittest.TestCase):
    def test_health_reports_database(self) -> None:
        app, _ = build_test_app()
        resp = TestClient(app).get("/api/v1/health/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok", "environment": "dev", "database": "connected"})


if __name__ == "__main__":
    unittest.main()
