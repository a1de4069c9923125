"""Utility script to purge old and expired supplier notifications."""

from __future__ import annotations

import argparse

from app.application.use_cases.notifications import NotificationService
from app.config import get_settings
from app.infrastructure.database import SessionLocal, initialize_database
from app.infrastructure.repositories import NotificationStoreError


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the cleanup sweep."""

    parser = argparse.ArgumentParser(
        description="Delete expired notifications and, optionally, old ones of a supplier.",
    )
    parser.add_argument(
        "--supplier",
        action="append",
        default=[],
        help="Supplier id whose old notifications are removed (repeatable)",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Age threshold in days (defaults to NOTIFICATION_RETENTION_DAYS)",
    )
    return parser.parse_args()


def main() -> None:
    """Run the cleanup sweep using the provided command line arguments."""

    args = parse_args()
    days = args.days or get_settings().notification_retention_days
    if days <= 0:
        raise SystemExit("--days must be a positive number of days.")

    initialize_database()

    session = SessionLocal()
    try:
        service = NotificationService(session)
        expired = service.cleanup_expired()
        removed = {supplier: service.cleanup(supplier, days) for supplier in args.supplier}
    except NotificationStoreError as exc:
        raise SystemExit(f"Cleanup failed: {exc}") from exc
    else:
        print(f"Expired notifications removed: {expired}")
        for supplier, count in removed.items():
            print(f"  {supplier}: {count} notification(s) older than {days} days")
    finally:
        session.close()


if __name__ == "__main__":
    main()
