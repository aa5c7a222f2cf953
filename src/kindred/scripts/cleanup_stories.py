# src/kindred/scripts/cleanup_stories.py
"""
Cron job to remove expired stories.

Reads already hide expired stories, so this only reclaims space. It is safe
to run as often as you like, including while the API is serving traffic.
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime

from kindred.core.errors import StorageError
from kindred.core.settings import settings
from kindred.db.session import SessionLocal
from kindred.db.time import as_utc
from kindred.services.stories import cleanup_expired_stories

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Delete stories whose expiry time has passed")
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        default=None,
        help="Treat this ISO-8601 timestamp as the current time (UTC if no offset is given).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level.upper())
    now = as_utc(args.now) if args.now else None

    db = SessionLocal()
    try:
        removed = cleanup_expired_stories(db, now)
    except StorageError as exc:
        print(f"[cleanup-stories] ERROR: {exc}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(f"[cleanup-stories] removed {removed} expired stories")
    return 0


if __name__ == "__main__":
    sys.exit(main())
