#!/usr/bin/env python3
"""
List time tracker entries that repeat the same project/task on the same date.

Usage:
    uv run python src/scripts/find_duplicates.py --month 2025-11
"""

import argparse
import asyncio
import calendar
import sys
from datetime import date
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.conflicts import find_duplicates
from core.logging_utils import setup_logging
from services.factory import open_ledger
from services.prompts import format_entry


async def main(month: str | None = None):
    setup_logging()
    today = date.today()
    year, month_num = map(int, month.split("-")) if month else (today.year, today.month)
    _, last_day = calendar.monthrange(year, month_num)
    start, end = date(year, month_num, 1), date(year, month_num, last_day)

    async with open_ledger() as ledger:
        reports = await ledger.get_user_reports(start.isoformat(), end.isoformat())

    print(f"Total entries for {start:%Y-%m}: {len(reports)}\n")
    duplicates = find_duplicates(reports)
    if not duplicates:
        print("✓ No duplicate entries found!")
        return

    print(f"Found {len(duplicates)} dates with duplicate entries:\n")
    for day, groups in duplicates.items():
        print(f"{day}:")
        for group in groups:
            print(f"  {group[0].project}/{group[0].task}: {len(group)} entries")
            for report in group:
                print(f"  {format_entry(report)} (id {report.id})")
        print()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Find duplicate time tracker entries")
    parser.add_argument("--month", help="Month to check (YYYY-MM). Defaults to current month.")
    args = parser.parse_args()

    asyncio.run(main(args.month))
