#!/usr/bin/env python3
"""
Delete time tracker entries for a month or a single date.

Usage:
    uv run python src/scripts/delete_time_entries.py --month 2025-11
    uv run python src/scripts/delete_time_entries.py --date 2025-11-24 --yes
"""

import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH
from core.database import AuditLog, create_schema, get_connection
from core.errors import ConfigurationError
from core.logging_utils import setup_logging
from services.factory import build_cleaner, open_ledger
from services.sync import format_summary


async def main(month: str | None, day: str | None, dry_run: bool):
    setup_logging()
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection()
    try:
        create_schema(conn)
        async with open_ledger() as ledger:
            cleaner = build_cleaner(ledger, AuditLog(conn))
            if day:
                target = datetime.strptime(day, "%Y-%m-%d").date()
                summary = await cleaner.delete_date(target, dry_run=dry_run)
            else:
                summary = await cleaner.delete_month(month, dry_run=dry_run)
    except ConfigurationError as e:
        print(f"\n✗ Configuration error: {e}")
        sys.exit(1)
    finally:
        conn.close()

    if not summary.days:
        print("No entries found for this period")
        return
    print()
    print(format_summary(summary))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Delete time tracker entries")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--month", help="Delete all entries in month (YYYY-MM)")
    target.add_argument("--date", help="Delete all entries on date (YYYY-MM-DD)")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be deleted")
    parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    args = parser.parse_args()

    if not args.yes and not args.dry_run:
        period = args.month or args.date
        answer = input(f"Delete ALL time tracker entries for {period}? [y/N]: ")
        if answer.strip().lower() not in {"y", "yes"}:
            print("Aborted.")
            sys.exit(0)

    asyncio.run(main(args.month, args.date, args.dry_run))
