"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import ClassificationPolicy, LedgerTargets  # noqa: E402
from core.day_calculator import DayCalculator  # noqa: E402
from models.entries import EntryType, ExistingReport, TimeEntry  # noqa: E402
from models.events import CalendarEvent, EventTime  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def policy():
    """Friday/Saturday weekend, default vocabularies."""
    return ClassificationPolicy(weekend_days=frozenset({5, 6}))


@pytest.fixture
def targets():
    return LedgerTargets(
        internal_project="14",
        meeting_task="13",
        leave_task="8",
        client_project="938",
        client_task="5",
    )


@pytest.fixture
def calculator(policy, targets):
    return DayCalculator(policy, targets, workday_hours=9)


def make_event(
    summary: str,
    start: str | None = None,
    end: str | None = None,
    event_id: str | None = None,
    all_day: bool = False,
) -> CalendarEvent:
    """Build an event; ``all_day`` puts start/end in the date-only slot."""
    if all_day:
        start_time, end_time = EventTime(date=start), EventTime(date=end)
    else:
        start_time, end_time = EventTime(date_time=start), EventTime(date_time=end)
    return CalendarEvent(
        id=event_id or f"evt-{summary}-{start}",
        summary=summary,
        start=start_time,
        end=end_time,
    )


@pytest.fixture
def event_factory():
    return make_event


@pytest.fixture
def sample_entry():
    return TimeEntry(
        date="2025-11-20",
        project="14",
        task="13",
        hours=9.0,
        note="Meetings: Planning",
        type=EntryType.MEETING,
    )


@pytest.fixture
def sample_report():
    return ExistingReport(
        id=501,
        project="14",
        task="13",
        date="2025-11-20",
        hours=9.0,
        note="Recorded by hand",
    )
