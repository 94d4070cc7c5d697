"""
Create a user without an invite code (e.g. an extra admin). Run from project root:
  python -m app.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m app.scripts.create_user alice your-secure-password admin
"""
import argparse
import sys

from app.core.database import SessionLocal
from app.core.exceptions import ValidationError
from app.models.user import ROLE_ADMIN, ROLE_USER
from app.services.credentials import create_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Timi user (bypasses invite codes).")
    parser.add_argument("username", help="Username (2-20 chars)")
    parser.add_argument("password", help="Password (at least 6 chars)")
    parser.add_argument("role", nargs="?", default=ROLE_USER, choices=[ROLE_USER, ROLE_ADMIN])
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        create_user(db, args.username.strip(), args.password, args.role)
    except ValidationError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{args.username.strip()}' with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
