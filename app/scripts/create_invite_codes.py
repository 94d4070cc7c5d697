"""
Generate invite codes from a shell. Run from project root:
  python -m app.scripts.create_invite_codes [--count N] [--expires-in-days D]
"""
import argparse
import logging
import sys
from datetime import UTC, datetime, timedelta

from app.core.database import SessionLocal
from app.services.invites import MAX_CODES_PER_REQUEST, generate_codes

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate one-time registration invite codes.")
    parser.add_argument("--count", type=int, default=1, help=f"Number of codes (1-{MAX_CODES_PER_REQUEST})")
    parser.add_argument("--expires-in-days", type=float, default=None, help="Optional lifetime in days")
    args = parser.parse_args(argv)

    expires_at = None
    if args.expires_in_days is not None:
        expires_at = datetime.now(UTC) + timedelta(days=args.expires_in_days)

    db = SessionLocal()
    try:
        codes = generate_codes(db, args.count, expires_at)
        for code in codes:
            print(code.code)
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
