"""
Sync orchestration: calendar -> day computations -> conflict decisions -> ledger.

Reads may run concurrently; ledger writes are applied one at a time, date by
date in ascending order, deletions before additions within a date.
"""

import asyncio
import calendar
import logging
from dataclasses import dataclass, field
from datetime import date

from core.conflicts import ConflictResolver
from core.database import AuditLog
from core.day_calculator import DayCalculator, iter_dates
from core.errors import RemoteError
from models.entries import (
    ConflictAction,
    ConflictResolution,
    DayCalculation,
    ExistingReport,
    TimeEntry,
)
from models.events import CalendarEvent

logger = logging.getLogger(__name__)


# =============================================================================
# SUMMARY
# =============================================================================


@dataclass
class DaySummary:
    """Outcome for one date."""

    date: str
    action: ConflictAction | None = None
    added: int = 0
    deleted: int = 0
    skipped: int = 0
    failed: int = 0
    unresolved: bool = False
    errors: list[str] = field(default_factory=list)


@dataclass
class SyncSummary:
    """Per-date and aggregate counts for a run."""

    start_date: str
    end_date: str
    dry_run: bool = False
    days: dict[str, DaySummary] = field(default_factory=dict)
    # The plan behind a sync run, kept for previews
    calculations: list[DayCalculation] = field(default_factory=list, repr=False)
    resolutions: dict[str, ConflictResolution] = field(default_factory=dict, repr=False)

    def day(self, day: str) -> DaySummary:
        if day not in self.days:
            self.days[day] = DaySummary(date=day)
        return self.days[day]

    @property
    def added(self) -> int:
        return sum(d.added for d in self.days.values())

    @property
    def deleted(self) -> int:
        return sum(d.deleted for d in self.days.values())

    @property
    def skipped(self) -> int:
        return sum(d.skipped for d in self.days.values())

    @property
    def skipped_days(self) -> int:
        return sum(1 for d in self.days.values() if d.action == ConflictAction.SKIP)

    @property
    def failed(self) -> int:
        return sum(d.failed for d in self.days.values())

    @property
    def unresolved(self) -> list[str]:
        return sorted(d.date for d in self.days.values() if d.unresolved)


def format_summary(summary: SyncSummary) -> str:
    """Human-readable run summary."""
    title = "Sync Summary (dry run)" if summary.dry_run else "Sync Summary"
    lines = [f"=== {title}: {summary.start_date} to {summary.end_date} ==="]
    for day in sorted(summary.days):
        d = summary.days[day]
        if d.unresolved:
            lines.append(f"  {day}: unresolved ({'; '.join(d.errors)})")
            continue
        action = d.action.value if d.action else "-"
        line = f"  {day}: {action} | added {d.added}, deleted {d.deleted}, skipped {d.skipped}"
        if d.failed:
            line += f", failed {d.failed}"
        lines.append(line)
    lines.append(f"✓ Added: {summary.added} entries")
    if summary.deleted:
        lines.append(f"✓ Deleted: {summary.deleted} entries")
    lines.append(f"⊘ Skipped: {summary.skipped} entries ({summary.skipped_days} days)")
    lines.append(f"✗ Errors: {summary.failed} entries")
    if summary.unresolved:
        lines.append(f"! Unresolved dates: {', '.join(summary.unresolved)}")
    return "\n".join(lines)


# =============================================================================
# DATE UTILITIES
# =============================================================================


def month_range(year_month: str | None = None, today: date | None = None) -> tuple[date, date]:
    """
    First and last date to sync for a month.

    Args:
        year_month: YYYY-MM. Uses the current month if None.
        today: Caps the end date so future dates are never synced.
    """
    today = today or date.today()
    if year_month:
        year, month = map(int, year_month.split("-"))
    else:
        year, month = today.year, today.month

    first_of_month = date(year, month, 1)
    _, last_day = calendar.monthrange(year, month)
    last_of_month = date(year, month, last_day)
    return first_of_month, min(last_of_month, today)


def _unique(events: list[CalendarEvent]) -> list[CalendarEvent]:
    seen = set()
    unique = []
    for event in events:
        key = (event.id, event.start.value)
        if key not in seen:
            seen.add(key)
            unique.append(event)
    return unique


# =============================================================================
# LEDGER CLEANUP
# =============================================================================


class LedgerCleaner:
    """Ledger-only operations; needs no calendar access."""

    def __init__(self, ledger, audit: AuditLog | None = None):
        self.ledger = ledger
        self.audit = audit

    # -------------------------------------------------------------------------
    # Delete / cleanup
    # -------------------------------------------------------------------------

    async def delete_range(self, start: date, end: date, dry_run: bool = False) -> SyncSummary:
        """Delete every existing report between start and end (inclusive)."""
        summary = SyncSummary(start.isoformat(), end.isoformat(), dry_run=dry_run)
        if self.audit:
            self.audit.start_run("delete", summary.start_date, summary.end_date, dry_run)

        # Per-day reads; the month query is not reliable on every ledger
        for day in iter_dates(start, end):
            try:
                reports = await self.ledger.get_existing_reports(day)
            except RemoteError as e:
                logger.warning("Could not fetch reports for %s: %s", day, e)
                self._mark_unresolved(summary, day, f"ledger read failed: {e}")
                continue
            if not reports:
                continue
            day_summary = summary.day(day)
            for report in reports:
                await self._delete(day, report, day_summary, dry_run)

        self._finish(summary)
        return summary

    async def delete_month(self, year_month: str, dry_run: bool = False) -> SyncSummary:
        year, month = map(int, year_month.split("-"))
        _, last_day = calendar.monthrange(year, month)
        return await self.delete_range(
            date(year, month, 1), date(year, month, last_day), dry_run=dry_run
        )

    async def delete_date(self, day: date, dry_run: bool = False) -> SyncSummary:
        return await self.delete_range(day, day, dry_run=dry_run)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _delete(
        self, day: str, report: ExistingReport, day_summary: DaySummary, dry_run: bool
    ) -> None:
        if not dry_run:
            try:
                await self.ledger.delete_entry(report.id)
            except RemoteError as e:
                day_summary.failed += 1
                day_summary.errors.append(f"delete {report.id}: {e}")
                logger.warning(
                    "Failed to delete entry %s (%s %s/%s): %s",
                    report.id, day, report.project, report.task, e,
                )
                if self.audit:
                    self.audit.record(
                        day, "error", project=report.project, task=report.task,
                        report_id=report.id, message=f"delete failed: {e}",
                    )
                return
        day_summary.deleted += 1
        logger.info("Deleted %s/%s (%gh) on %s", report.project, report.task, report.hours, day)
        if self.audit:
            # Full content kept so a failed replace can be restored by hand
            self.audit.record(
                day, "delete", project=report.project, task=report.task,
                duration=f"{report.hours:g}", note=report.note, report_id=report.id,
            )

    async def _add(
        self, day: str, entry: TimeEntry, day_summary: DaySummary, dry_run: bool
    ) -> None:
        if not dry_run:
            try:
                await self.ledger.add_entry(entry)
            except RemoteError as e:
                day_summary.failed += 1
                day_summary.errors.append(f"add {entry.type.value}: {e}")
                logger.warning(
                    "Failed to add %s entry for %s (%s/%s, %sh): %s",
                    entry.type.value, day, entry.project, entry.task, entry.duration, e,
                )
                if self.audit:
                    self.audit.record(
                        day, "error", project=entry.project, task=entry.task,
                        duration=entry.duration, note=entry.note, message=f"add failed: {e}",
                    )
                return
        day_summary.added += 1
        logger.info("Added %s entry for %s (%sh)", entry.type.value, day, entry.duration)
        if self.audit:
            self.audit.record(
                day, "add", project=entry.project, task=entry.task,
                duration=entry.duration, note=entry.note,
            )

    def _mark_unresolved(self, summary: SyncSummary, day: str, reason: str) -> None:
        day_summary = summary.day(day)
        day_summary.unresolved = True
        day_summary.errors.append(reason)
        if self.audit and self.audit.run_id is not None:
            self.audit.record(day, "error", message=reason)

    def _finish(self, summary: SyncSummary) -> None:
        if self.audit:
            self.audit.finish_run(summary.added, summary.deleted, summary.skipped, summary.failed)


# =============================================================================
# ORCHESTRATOR
# =============================================================================


class SyncOrchestrator(LedgerCleaner):
    """Drives the pipeline across a date range and applies the resolutions."""

    def __init__(
        self,
        calendar_source,
        ledger,
        calculator: DayCalculator,
        resolver: ConflictResolver,
        work_calendar_id: str,
        holiday_calendar_id: str,
        audit: AuditLog | None = None,
    ):
        super().__init__(ledger, audit)
        self.calendar = calendar_source
        self.calculator = calculator
        self.resolver = resolver
        self.work_calendar_id = work_calendar_id
        self.holiday_calendar_id = holiday_calendar_id

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def _fetch_span(
        self, start: date, end: date
    ) -> tuple[list[CalendarEvent], list[CalendarEvent]]:
        work, holidays = await asyncio.gather(
            self.calendar.list_events(self.work_calendar_id, start, end),
            self.calendar.list_events(self.holiday_calendar_id, start, end),
            return_exceptions=True,
        )
        for result in (work, holidays):
            if isinstance(result, BaseException):
                raise result
        return work, holidays

    async def fetch_events(
        self, start: date, end: date
    ) -> tuple[list[CalendarEvent], list[CalendarEvent], set[str]]:
        """
        Work and holiday events for the range, plus dates that could not be read.

        A failed range read falls back to reading day by day so one bad date
        does not take the whole range down.
        """
        try:
            work, holidays = await self._fetch_span(start, end)
            return work, holidays, set()
        except RemoteError as e:
            if start == end:
                logger.warning("Calendar fetch failed for %s: %s", start.isoformat(), e)
                return [], [], {start.isoformat()}
            logger.warning("Calendar fetch failed for %s..%s (%s); reading per day", start, end, e)

        work, holidays, unresolved = [], [], set()
        for day in iter_dates(start, end):
            day_date = date.fromisoformat(day)
            try:
                day_work, day_holidays = await self._fetch_span(day_date, day_date)
            except RemoteError as e:
                logger.warning("Calendar fetch failed for %s: %s", day, e)
                unresolved.add(day)
                continue
            work.extend(day_work)
            holidays.extend(day_holidays)
        # Events spanning midnight come back from both days' reads
        return _unique(work), _unique(holidays), unresolved

    async def fetch_existing(
        self, days: list[str], summary: SyncSummary
    ) -> tuple[list[ExistingReport], set[str]]:
        """Existing ledger reports for ``days``; failing dates are marked unresolved."""
        existing: list[ExistingReport] = []
        unresolved: set[str] = set()
        for day in days:
            try:
                existing.extend(await self.ledger.get_existing_reports(day))
            except RemoteError as e:
                logger.warning("Could not fetch reports for %s: %s", day, e)
                self._mark_unresolved(summary, day, f"ledger read failed: {e}")
                unresolved.add(day)
        return existing, unresolved

    # -------------------------------------------------------------------------
    # Sync
    # -------------------------------------------------------------------------

    async def plan(
        self, start: date, end: date, summary: SyncSummary
    ) -> tuple[list[DayCalculation], dict[str, ConflictResolution]]:
        """Compute the range and decide every date, without writing anything."""
        work, holidays, unresolved = await self.fetch_events(start, end)
        for day in sorted(unresolved):
            self._mark_unresolved(summary, day, "calendar read failed")

        calculations = [
            calc
            for calc in self.calculator.compute_range(start, end, work, holidays)
            if calc.date not in unresolved
        ]
        with_entries = [calc for calc in calculations if calc.entries]
        logger.info("%d days need time entries", len(with_entries))

        existing, ledger_unresolved = await self.fetch_existing(
            [calc.date for calc in with_entries], summary
        )
        to_resolve = [calc for calc in with_entries if calc.date not in ledger_unresolved]
        resolutions = self.resolver.resolve(to_resolve, existing)
        return calculations, resolutions

    async def sync_range(self, start: date, end: date, dry_run: bool = False) -> SyncSummary:
        """Sync every date in the inclusive range."""
        summary = SyncSummary(start.isoformat(), end.isoformat(), dry_run=dry_run)
        if self.audit:
            self.audit.start_run("sync", summary.start_date, summary.end_date, dry_run)

        calculations, resolutions = await self.plan(start, end, summary)
        summary.calculations, summary.resolutions = calculations, resolutions
        proposed = {calc.date: len(calc.entries) for calc in calculations}
        for day in sorted(resolutions):
            await self.apply_resolution(
                day, resolutions[day], summary, dry_run, proposed_count=proposed.get(day, 0)
            )

        self._finish(summary)
        return summary

    async def sync_month(
        self, year_month: str | None = None, today: date | None = None, dry_run: bool = False
    ) -> SyncSummary:
        start, end = month_range(year_month, today)
        return await self.sync_range(start, end, dry_run=dry_run)

    async def sync_date(self, day: date, dry_run: bool = False) -> SyncSummary:
        return await self.sync_range(day, day, dry_run=dry_run)

    async def apply_resolution(
        self,
        day: str,
        resolution: ConflictResolution,
        summary: SyncSummary,
        dry_run: bool = False,
        proposed_count: int = 0,
    ) -> DaySummary:
        """
        Apply one date's resolution: deletions first, then additions.

        A failed deletion or addition is counted and logged; the remaining
        entries are still attempted and succeeded ones are kept.
        ``proposed_count`` is how many computed entries a skip drops.
        """
        day_summary = summary.day(day)
        day_summary.action = resolution.action

        if resolution.action == ConflictAction.SKIP:
            skipped = proposed_count
            day_summary.skipped += skipped
            logger.info("Skipped %s", day)
            if self.audit:
                self.audit.record(day, "skip", message=f"{skipped} proposed entries dropped")
            return day_summary

        for report in resolution.entries_to_delete:
            await self._delete(day, report, day_summary, dry_run)

        for entry in resolution.entries_to_add:
            await self._add(day, entry, day_summary, dry_run)

        return day_summary
