"""
Create a user (e.g. first admin). Run from project root:
  python -m colloquy.scripts.create_user EMAIL PASSWORD NAME [role]
Example:
  python -m colloquy.scripts.create_user admin@example.com your-secure-password Admin ADMIN
"""
import argparse
import sys

from dotenv import load_dotenv

from colloquy.core.config import get_settings
from colloquy.core.database import build_engine, build_session_factory
from colloquy.core.errors import Conflict
from colloquy.core.security import NAME_MAX_LEN, NAME_MIN_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from colloquy.models.user import UserRole
from colloquy.schemas.auth import EMAIL_PATTERN
from colloquy.services.accounts import register_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Colloquy user account.")
    parser.add_argument("email", help="Email address (stored lowercase)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("name", help=f"Display name ({NAME_MIN_LEN}-{NAME_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=UserRole.USER.value,
        choices=[r.value for r in UserRole],
    )
    args = parser.parse_args(argv)

    email = args.email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1
    name = args.name.strip()
    if not (NAME_MIN_LEN <= len(name) <= NAME_MAX_LEN):
        print(f"Name must be {NAME_MIN_LEN}-{NAME_MAX_LEN} characters.", file=sys.stderr)
        return 1

    load_dotenv()
    engine = build_engine(get_settings())
    db = build_session_factory(engine)()
    try:
        user = register_user(db, email, args.password, name, role=UserRole(args.role))
    except Conflict:
        print(f"User '{email}' already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()
        engine.dispose()
    print(f"Created user '{user.email}' (id {user.id}) with role '{user.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
