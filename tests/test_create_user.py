"""create_user script: argument validation and account creation."""

import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import MagicMock, patch

from colloquy.scripts import create_user
from support import make_engine, make_settings


@patch("colloquy.scripts.create_user.load_dotenv", MagicMock())
@patch("colloquy.scripts.create_user.get_settings", MagicMock(side_effect=make_settings))
class TestCreateUserScript(unittest.TestCase):
    def _run(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with patch("colloquy.scripts.create_user.build_engine", return_value=make_engine()):
            with redirect_stdout(out), redirect_stderr(err):
                code = create_user.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_creates_admin(self) -> None:
        code, out, _ = self._run("Admin@Example.com", "a-long-password", "Admin", "ADMIN")
        self.assertEqual(code, 0)
        self.assertIn("admin@example.com", out)
        self.assertIn("ADMIN", out)

    def test_rejects_bad_email(self) -> None:
        code, _, err = self._run("not-an-email", "a-long-password", "Admin")
        self.assertEqual(code, 1)
        self.assertIn("Invalid email", err)

    def test_rejects_short_password(self) -> None:
        code, _, err = self._run("a@example.com", "short", "Admin")
        self.assertEqual(code, 1)
        self.assertIn("Password", err)

    def test_rejects_short_name(self) -> None:
        code, _, err = self._run("a@example.com", "a-long-password", " x ")
        self.assertEqual(code, 1)
        self.assertIn("Name", err)


if __name__ == "__main__":
    unittest.main()
