#!/usr/bin/env python3
"""
Sync calendar events to the time tracker.

Reads the work and holiday calendars, computes the entries each day should
have, resolves conflicts with entries already recorded, and submits the result.

Usage:
    uv run python src/scripts/sync_time_entries.py                    # current month
    uv run python src/scripts/sync_time_entries.py --month 2025-11
    uv run python src/scripts/sync_time_entries.py --date 2025-11-24 --on-conflict replace
    uv run python src/scripts/sync_time_entries.py --month 2025-11 --dry-run --preview
"""

import argparse
import asyncio
import sys
from datetime import date, datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH, OUTPUT_DIR, require_settings
from core.database import AuditLog, create_schema, get_connection
from core.errors import ConfigurationError
from core.graph_client import close_graph_client
from core.logging_utils import setup_logging
from services.email import send_error_email, send_summary_email
from services.factory import build_orchestrator, open_ledger
from services.prompts import fixed_decision, prompt_conflict_resolution
from services.reports import create_sync_preview
from services.sync import format_summary, month_range


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync calendar events to the time tracker")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--month", help="Sync specific month (YYYY-MM). Defaults to current month.")
    target.add_argument("--date", help="Sync single date (YYYY-MM-DD)")
    parser.add_argument(
        "--on-conflict",
        choices=["prompt", "skip", "replace", "add"],
        default="prompt",
        help="What to do when a date already has entries (default: ask)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Preview changes without submitting")
    parser.add_argument("--preview", action="store_true", help="Write an Excel preview of the plan")
    parser.add_argument("--email", action="store_true", help="Email the summary when done")
    return parser.parse_args(argv)


def get_sync_range(args: argparse.Namespace) -> tuple[date, date]:
    if args.date:
        day = datetime.strptime(args.date, "%Y-%m-%d").date()
        return day, day
    return month_range(args.month)


async def main(args: argparse.Namespace):
    """Main entry point."""
    setup_logging()
    if args.email:
        require_settings("SYNC_FROM_EMAIL", "SYNC_REPORT_EMAIL")

    decide = (
        prompt_conflict_resolution if args.on_conflict == "prompt" else fixed_decision(args.on_conflict)
    )
    start_date, end_date = get_sync_range(args)
    print(f"\nSyncing period: {start_date} to {end_date}" + (" (dry run)" if args.dry_run else ""))

    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection()
    try:
        create_schema(conn)
        async with open_ledger() as ledger:
            print("✓ Authenticated with time tracker")
            orchestrator = build_orchestrator(ledger, decide, AuditLog(conn))
            summary = await orchestrator.sync_range(start_date, end_date, dry_run=args.dry_run)

        print()
        print(format_summary(summary))

        if args.preview:
            output_path = (
                OUTPUT_DIR / "previews" / f"sync_preview_{start_date:%Y_%m_%d}_{end_date:%Y_%m_%d}.xlsx"
            )
            create_sync_preview(summary.calculations, summary.resolutions, output_path)
            print(f"Saved Excel preview to: {output_path}")

        if args.email:
            await send_summary_email(summary)

    except ConfigurationError as e:
        print(f"\n✗ Configuration error: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"\n✗ Sync failed: {e}")
        if args.email:
            await send_error_email(e)
        raise
    finally:
        conn.close()
        await close_graph_client()

    print("\n✓ Sync completed")


if __name__ == "__main__":
    asyncio.run(main(parse_args()))
