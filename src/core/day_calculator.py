"""
Per-day computation of the ledger entries that should exist.

Decision order for a date (first match wins):
1. Non-working holiday -> nothing booked
2. Weekend -> nothing booked
3. Office-presence event -> one client entry for the whole workday
4. Leave event -> one leave entry for the whole workday
5. Otherwise -> meeting entry for the meeting hours and a client entry for
   whatever remains of the workday
"""

from datetime import date, timedelta

from core.classifier import EventClassifier
from core.config import (
    DEFAULT_POLICY,
    DEFAULT_TARGETS,
    WORKDAY_HOURS,
    ClassificationPolicy,
    LedgerTargets,
)
from core.holidays import HolidayDetector, events_on
from models.entries import DayCalculation, EntryType, TimeEntry, round_hours
from models.events import CalendarEvent, ClassifiedEvent, EventCategory

OFFICE_PRESENCE_NOTE = "Working from clients office"
LEAVE_NOTE = "Vacation/PTO"
DEFAULT_WORK_NOTE = "Development work"


def iter_dates(start_date: str | date, end_date: str | date):
    """Yield every date in the inclusive span as yyyy-mm-dd, ascending."""
    if isinstance(start_date, str):
        start_date = date.fromisoformat(start_date)
    if isinstance(end_date, str):
        end_date = date.fromisoformat(end_date)
    current = start_date
    while current <= end_date:
        yield current.isoformat()
        current += timedelta(days=1)


class DayCalculator:
    """Turn a day's calendar events into the entries to submit."""

    def __init__(
        self,
        policy: ClassificationPolicy = DEFAULT_POLICY,
        targets: LedgerTargets = DEFAULT_TARGETS,
        workday_hours: float = WORKDAY_HOURS,
    ):
        # Refuse to produce entries with empty project/task identifiers
        targets.validate()
        self.targets = targets
        self.workday_hours = workday_hours
        self.classifier = EventClassifier(policy)
        self.holidays = HolidayDetector(policy)

    def compute_day(
        self,
        day: str,
        work_events: list[CalendarEvent],
        holiday_events: list[CalendarEvent],
        workday_hours: float | None = None,
    ) -> DayCalculation:
        """Compute the DayCalculation for one yyyy-mm-dd date."""
        budget = self.workday_hours if workday_hours is None else workday_hours

        if self.holidays.is_non_working_holiday(day, holiday_events):
            return DayCalculation(date=day, is_holiday=True)

        if self.holidays.is_weekend(day):
            return DayCalculation(date=day, is_weekend=True)

        classified = self.classifier.classify_all(events_on(day, work_events))
        categories = {c.category for c in classified}

        if EventCategory.OFFICE_PRESENCE in categories:
            entry = self._entry(day, EntryType.OFFICE_PRESENCE, budget, OFFICE_PRESENCE_NOTE)
            return DayCalculation(
                date=day,
                is_office_presence=True,
                office_hours=round_hours(budget),
                entries=(entry,),
            )

        if EventCategory.LEAVE in categories:
            entry = self._entry(day, EntryType.LEAVE, budget, LEAVE_NOTE)
            return DayCalculation(date=day, is_leave=True, entries=(entry,))

        meetings = [c for c in classified if c.category == EventCategory.MEETING]
        meeting_hours = round_hours(sum(self._booked_hours(m, budget) for m in meetings))
        office_hours = round_hours(max(0.0, budget - meeting_hours))

        entries = []
        if meeting_hours > 0:
            titles = ", ".join(m.event.summary for m in meetings)
            entries.append(
                self._entry(day, EntryType.MEETING, meeting_hours, f"Meetings: {titles}")
            )
        if office_hours > 0:
            entries.append(
                self._entry(day, EntryType.OFFICE_PRESENCE, office_hours, DEFAULT_WORK_NOTE)
            )

        return DayCalculation(
            date=day,
            meeting_hours=meeting_hours,
            office_hours=office_hours,
            entries=tuple(entries),
        )

    def compute_range(
        self,
        start_date: str | date,
        end_date: str | date,
        work_events: list[CalendarEvent],
        holiday_events: list[CalendarEvent],
        workday_hours: float | None = None,
    ) -> list[DayCalculation]:
        """One DayCalculation per date in the inclusive span; days are independent."""
        return [
            self.compute_day(day, work_events, holiday_events, workday_hours)
            for day in iter_dates(start_date, end_date)
        ]

    @staticmethod
    def _booked_hours(meeting: ClassifiedEvent, budget: float) -> float:
        # An all-day meeting fills the workday, not 24 hours
        if meeting.event.start.date and not meeting.event.start.date_time:
            return budget
        return meeting.hours

    def _entry(self, day: str, entry_type: EntryType, hours: float, note: str) -> TimeEntry:
        if entry_type == EntryType.MEETING:
            project, task = self.targets.internal_project, self.targets.meeting_task
        elif entry_type == EntryType.LEAVE:
            project, task = self.targets.internal_project, self.targets.leave_task
        else:
            project, task = self.targets.client_project, self.targets.client_task
        return TimeEntry(
            date=day,
            project=project,
            task=task,
            hours=round_hours(hours),
            note=note,
            type=entry_type,
        )
