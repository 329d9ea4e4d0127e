"""
Event classification: calendar event -> category + duration in hours.
"""

import logging
import re
from datetime import datetime

from core.config import DEFAULT_POLICY, ClassificationPolicy
from models.events import CalendarEvent, ClassifiedEvent, EventCategory, EventTime
from models.entries import round_hours

logger = logging.getLogger(__name__)

# Graph emits 7 fractional digits; datetime accepts at most 6
_FRACTION = re.compile(r"(\.\d{6})\d+")


def parse_instant(value: str) -> datetime:
    """
    Parse a date-only or timestamp string.

    Raises:
        ValueError: if the value is not ISO 8601
    """
    text = _FRACTION.sub(r"\1", value.strip())
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def event_hours(start: EventTime, end: EventTime) -> float:
    """
    Duration between two event endpoints in hours, rounded to 2 decimals.

    Missing or malformed endpoints give 0 rather than an error.
    """
    if not start.value or not end.value:
        return 0.0
    try:
        delta = parse_instant(end.value) - parse_instant(start.value)
    except (TypeError, ValueError) as e:
        # TypeError: one naive and one aware endpoint
        logger.debug("Unusable event times %r -> %r: %s", start.value, end.value, e)
        return 0.0
    return max(0.0, round_hours(delta.total_seconds() / 3600))


def _contains_any(text: str, terms: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(term.lower() in lowered for term in terms)


class EventClassifier:
    """Tag events as office-presence, leave, or meeting by their title."""

    def __init__(self, policy: ClassificationPolicy = DEFAULT_POLICY):
        self.policy = policy

    def is_office_presence(self, event: CalendarEvent) -> bool:
        return _contains_any(event.summary or "", self.policy.office_presence_terms)

    def is_leave(self, event: CalendarEvent) -> bool:
        return _contains_any(event.summary or "", self.policy.leave_terms)

    def classify(self, event: CalendarEvent) -> ClassifiedEvent:
        """Office-presence wins over leave; anything else is a meeting."""
        if self.is_office_presence(event):
            category = EventCategory.OFFICE_PRESENCE
        elif self.is_leave(event):
            category = EventCategory.LEAVE
        else:
            category = EventCategory.MEETING
        return ClassifiedEvent(
            event=event, category=category, hours=event_hours(event.start, event.end)
        )

    def classify_all(self, events: list[CalendarEvent]) -> list[ClassifiedEvent]:
        return [self.classify(event) for event in events]
