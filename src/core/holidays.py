"""
Holiday and weekend detection.
"""

from datetime import date

from core.config import DEFAULT_POLICY, ClassificationPolicy
from models.events import CalendarEvent


def events_on(day: str, events: list[CalendarEvent]) -> list[CalendarEvent]:
    """Events whose start date component equals ``day`` (yyyy-mm-dd)."""
    return [event for event in events if event.day == day]


class HolidayDetector:
    """Decide whether a date is a day off."""

    def __init__(self, policy: ClassificationPolicy = DEFAULT_POLICY):
        self.policy = policy

    def is_non_working_holiday(self, day: str, holiday_events: list[CalendarEvent]) -> bool:
        """
        True if any holiday-calendar event on ``day`` names a day-off holiday.

        Only the configured holiday names count; other entries on the holiday
        calendar (minor holidays, observances) are working days.
        """
        names = [name.lower() for name in self.policy.holiday_names]
        for event in events_on(day, holiday_events):
            summary = (event.summary or "").lower()
            if any(name in summary for name in names):
                return True
        return False

    def is_weekend(self, day: str | date) -> bool:
        if isinstance(day, str):
            day = date.fromisoformat(day)
        return day.isoweekday() in self.policy.weekend_days

    def is_workday(self, day: str, holiday_events: list[CalendarEvent]) -> bool:
        return not self.is_weekend(day) and not self.is_non_working_holiday(day, holiday_events)
