# src/kindred/scripts/tokens.py
"""Mint a bearer token for a user id, for local development and smoke tests."""
from __future__ import annotations

import argparse
import sys

from kindred.core.security import create_access_token


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print a signed access token for a user id")
    parser.add_argument("user_id", help="Identity to put in the token's sub claim")
    parser.add_argument(
        "--header",
        action="store_true",
        help="Print a complete Authorization header instead of the bare token.",
    )
    args = parser.parse_args(argv)

    token = create_access_token(args.user_id)
    print(f"Authorization: Bearer {token}" if args.header else token)
    return 0


if __name__ == "__main__":
    sys.exit(main())
