#!/usr/bin/env python3
"""
List the calendars of the configured mailbox (or every user's) from MS365.

Use this to find the ids for WORK_CALENDAR_ID and HOLIDAY_CALENDAR_ID.

Usage:
    uv run python src/scripts/list_users_calendars.py
    uv run python src/scripts/list_users_calendars.py --all-users
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import CALENDAR_USER_ID
from core.errors import RemoteError
from core.graph_client import close_graph_client, get_graph_client
from services.calendar import GraphCalendarSource


async def print_calendars(user_id: str):
    try:
        calendars = await GraphCalendarSource(user_id).list_calendars()
    except RemoteError as e:
        print(f"  Error fetching calendars: {e}")
        return

    if not calendars:
        print("  Calendars: None")
        return
    print(f"  Calendars ({len(calendars)}):")
    for cal in calendars:
        print(f"    - {cal['calendar_name']}")
        print(f"      ID: {cal['calendar_id']}")


async def main(all_users: bool):
    """List calendars."""
    if not all_users:
        if not CALENDAR_USER_ID:
            print("CALENDAR_USER_ID is not set; use --all-users or set it in .env")
            sys.exit(1)
        print(f"User: {CALENDAR_USER_ID}")
        await print_calendars(CALENDAR_USER_ID)
        return

    graph = get_graph_client()
    print("Fetching users from MS365...\n")
    users_response = await graph.users.get()
    users = users_response.value if users_response.value else []
    print(f"Found {len(users)} users\n")
    print("=" * 80)

    for user in users:
        print(f"\nUser: {user.display_name}")
        print(f"  Email: {user.user_principal_name}")
        print(f"  ID: {user.id}")
        await print_calendars(user.id)
        print("-" * 80)

    print("\nDone!")


async def run(all_users: bool):
    try:
        await main(all_users)
    finally:
        await close_graph_client()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="List MS365 calendars")
    parser.add_argument("--all-users", action="store_true", help="List calendars of every user")
    args = parser.parse_args()

    asyncio.run(run(args.all_users))
