"""
Wiring of the pipeline from environment configuration.
"""

from contextlib import asynccontextmanager

from core.config import (
    CALENDAR_TIMEZONE,
    CALENDAR_USER_ID,
    DEFAULT_POLICY,
    DEFAULT_TARGETS,
    HOLIDAY_CALENDAR_ID,
    TIME_TRACKER_API_URL,
    TIME_TRACKER_EMAIL,
    TIME_TRACKER_PASSWORD,
    WORK_CALENDAR_ID,
    WORKDAY_HOURS,
    require_settings,
)
from core.conflicts import ConflictResolver, DecisionCallback
from core.database import AuditLog
from core.day_calculator import DayCalculator
from services.calendar import GraphCalendarSource
from services.sync import LedgerCleaner, SyncOrchestrator
from services.time_tracker import TimeTrackerClient

LEDGER_SETTINGS = ("TIME_TRACKER_API_URL", "TIME_TRACKER_EMAIL", "TIME_TRACKER_PASSWORD")
CALENDAR_SETTINGS = (
    "MICROSOFT_GRAPH_TENANT_ID",
    "MICROSOFT_GRAPH_APP_ID",
    "MICROSOFT_GRAPH_CLIENT_SECRET",
    "CALENDAR_USER_ID",
    "WORK_CALENDAR_ID",
    "HOLIDAY_CALENDAR_ID",
)


@asynccontextmanager
async def open_ledger():
    """Logged-in TimeTrackerClient, closed on exit."""
    require_settings(*LEDGER_SETTINGS)
    async with TimeTrackerClient(TIME_TRACKER_API_URL) as ledger:
        await ledger.login(TIME_TRACKER_EMAIL, TIME_TRACKER_PASSWORD)
        yield ledger


def build_calculator() -> DayCalculator:
    """DayCalculator from config; raises ConfigurationError on unset identifiers."""
    return DayCalculator(DEFAULT_POLICY, DEFAULT_TARGETS, WORKDAY_HOURS)


def build_cleaner(ledger: TimeTrackerClient, audit: AuditLog | None = None) -> LedgerCleaner:
    """Ledger-only operations; the calendar settings may be unset."""
    return LedgerCleaner(ledger, audit)


def build_orchestrator(
    ledger: TimeTrackerClient,
    decide: DecisionCallback,
    audit: AuditLog | None = None,
) -> SyncOrchestrator:
    require_settings(*CALENDAR_SETTINGS)
    return SyncOrchestrator(
        calendar_source=GraphCalendarSource(CALENDAR_USER_ID, CALENDAR_TIMEZONE),
        ledger=ledger,
        calculator=build_calculator(),
        resolver=ConflictResolver(decide),
        work_calendar_id=WORK_CALENDAR_ID,
        holiday_calendar_id=HOLIDAY_CALENDAR_ID,
        audit=audit,
    )
