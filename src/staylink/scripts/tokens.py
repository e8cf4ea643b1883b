# src/staylink/scripts/tokens.py
"""Mint a bearer token for an existing user.

Login flows live outside the messaging service; this helper lets operators
and local clients obtain a token for REST calls and WebSocket frames.
"""

from __future__ import annotations

import argparse
import sys

from staylink.core.security import create_access_token
from staylink.db.session import SessionLocal
from staylink.models import User


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mint a bearer token for an existing user.")
    parser.add_argument("user_id", type=int, help="ID of the user the token is issued for")
    parser.add_argument(
        "--skip-lookup",
        action="store_true",
        help="Do not check that the user exists in the database",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if not args.skip_lookup:
        db = SessionLocal()
        try:
            if db.get(User, args.user_id) is None:
                print(f"User {args.user_id} not found", file=sys.stderr)
                return 1
        finally:
            db.close()

    print(create_access_token(args.user_id))
    return 0


if __name__ == "__main__":
    sys.exit(main())
