"""
Data models for calendar events.

Events come from the calendar source and are never mutated; classification
produces a fresh ClassifiedEvent per computation.
"""

from dataclasses import dataclass, field
from enum import Enum


class EventCategory(str, Enum):
    """Work category an event falls into."""

    OFFICE_PRESENCE = "office-presence"
    LEAVE = "leave"
    MEETING = "meeting"


@dataclass(frozen=True)
class EventTime:
    """An event endpoint: either a date-only value or a precise timestamp."""

    date: str | None = None  # yyyy-mm-dd, all-day events
    date_time: str | None = None  # ISO 8601 timestamp

    @property
    def value(self) -> str | None:
        """Timestamp if present, else the date."""
        return self.date_time or self.date

    @property
    def day(self) -> str | None:
        """Date component as yyyy-mm-dd."""
        if self.date:
            return self.date
        if self.date_time:
            return self.date_time.split("T")[0]
        return None


@dataclass(frozen=True)
class CalendarEvent:
    """Calendar event as read from the calendar source."""

    id: str
    summary: str
    start: EventTime
    end: EventTime
    description: str | None = None
    organizer: str | None = None
    attendees: tuple[str, ...] = field(default_factory=tuple)

    @property
    def day(self) -> str | None:
        """Date the event starts on."""
        return self.start.day


@dataclass(frozen=True)
class ClassifiedEvent:
    """A calendar event tagged with its category and duration in hours."""

    event: CalendarEvent
    category: EventCategory
    hours: float
