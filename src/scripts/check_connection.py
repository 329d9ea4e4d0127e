#!/usr/bin/env python3
"""
Check connections to the time tracker and MS Graph.

Logs into the ledger, verifies the configured project/task identifiers exist,
and reads today's events from the work and holiday calendars.

Usage:
    uv run python src/scripts/check_connection.py
"""

import asyncio
import sys
from datetime import date
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import (
    CALENDAR_TIMEZONE,
    CALENDAR_USER_ID,
    DEFAULT_TARGETS,
    HOLIDAY_CALENDAR_ID,
    WORK_CALENDAR_ID,
    require_settings,
)
from core.errors import TimeSyncError
from core.graph_client import close_graph_client
from core.logging_utils import setup_logging
from services.calendar import GraphCalendarSource
from services.factory import CALENDAR_SETTINGS, open_ledger
from services.time_tracker import check_targets


async def main():
    setup_logging()
    failed = False

    print("Connecting to time tracker...")
    try:
        async with open_ledger() as ledger:
            print("✓ Authenticated with time tracker")
            projects = await ledger.get_projects()
            print(f"✓ {len(projects)} projects available")
            problems = check_targets(DEFAULT_TARGETS, projects)
            for problem in problems:
                print(f"  ✗ {problem}")
            if not problems:
                print("✓ Configured project/task identifiers exist")
            failed = failed or bool(problems)
    except TimeSyncError as e:
        print(f"✗ Time tracker: {e}")
        failed = True

    print("\nConnecting to MS Graph...")
    try:
        require_settings(*CALENDAR_SETTINGS)
        source = GraphCalendarSource(CALENDAR_USER_ID, CALENDAR_TIMEZONE)
        today = date.today()
        for label, calendar_id in (("work", WORK_CALENDAR_ID), ("holiday", HOLIDAY_CALENDAR_ID)):
            events = await source.list_events(calendar_id, today, today)
            print(f"✓ {label} calendar: {len(events)} events today")
    except TimeSyncError as e:
        print(f"✗ Calendar: {e}")
        failed = True
    finally:
        await close_graph_client()

    if failed:
        print("\n✗ Connection test failed")
        sys.exit(1)
    print("\n✓ All connections successful")


if __name__ == "__main__":
    asyncio.run(main())
