"""
Calendar event fetching from MS Graph.
"""

import logging
import re
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from msgraph.generated.users.item.calendars.item.calendar_view.calendar_view_request_builder import (
    CalendarViewRequestBuilder,
)

from core.config import CALENDAR_TIMEZONE, CALENDAR_USER_ID
from core.errors import RemoteError
from core.graph_client import get_graph_client
from models.events import CalendarEvent, EventTime

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


def _strip_html(text: str) -> str:
    if "<" in text:
        text = re.sub(r"<[^>]+>", "\n", text)
    return "\n".join(line.strip() for line in text.splitlines() if line.strip())


def _event_time(value, all_day: bool) -> EventTime:
    """Convert a Graph DateTimeTimeZone into an EventTime."""
    date_time = getattr(value, "date_time", None) if value else None
    if not date_time:
        return EventTime()
    if all_day:
        return EventTime(date=date_time.split("T")[0])
    return EventTime(date_time=date_time)


def parse_event(event) -> CalendarEvent:
    """Parse MS Graph event into our format."""
    all_day = bool(getattr(event, "is_all_day", False))

    description = None
    if event.body and event.body.content:
        description = _strip_html(event.body.content.strip()) or None

    organizer = None
    if event.organizer and event.organizer.email_address:
        organizer = event.organizer.email_address.address

    attendees = tuple(
        attendee.email_address.address
        for attendee in (event.attendees or [])
        if attendee.email_address and attendee.email_address.address
    )

    return CalendarEvent(
        id=event.id or "",
        summary=event.subject or "",
        description=description,
        start=_event_time(event.start, all_day),
        end=_event_time(event.end, all_day),
        organizer=organizer,
        attendees=attendees,
    )


class GraphCalendarSource:
    """Reads a mailbox's calendars through MS Graph."""

    def __init__(self, user_id: str = CALENDAR_USER_ID, timezone: str = CALENDAR_TIMEZONE):
        self.user_id = user_id
        self.timezone = timezone

    def _calendars(self):
        return get_graph_client().users.by_user_id(self.user_id).calendars

    async def list_calendars(self) -> list[dict]:
        """Return id and name for every calendar of the mailbox."""
        try:
            response = await self._calendars().get()
        except Exception as e:
            raise RemoteError(f"Could not list calendars for {self.user_id}: {e}") from e
        calendars = response.value if response and response.value else []
        return [{"calendar_id": c.id, "calendar_name": c.name} for c in calendars]

    async def find_calendar_id(self, name: str) -> str | None:
        """Resolve a calendar id by case-insensitive name."""
        for calendar in await self.list_calendars():
            if (calendar["calendar_name"] or "").lower() == name.lower():
                return calendar["calendar_id"]
        return None

    async def list_events(
        self, calendar_id: str, start_date: date, end_date: date
    ) -> list[CalendarEvent]:
        """
        Fetch all events from a calendar within the inclusive date range.

        Uses the calendar view so recurring meetings come back as individual
        occurrences, and follows paging links.

        Raises:
            RemoteError: Graph unreachable or the response could not be read
        """
        tz = ZoneInfo(self.timezone)
        start_dt = datetime.combine(start_date, time.min).replace(tzinfo=tz)
        # End date should include the full day
        end_dt = datetime.combine(end_date + timedelta(days=1), time.min).replace(tzinfo=tz)

        query_params = CalendarViewRequestBuilder.CalendarViewRequestBuilderGetQueryParameters(
            start_date_time=start_dt.isoformat(),
            end_date_time=end_dt.isoformat(),
            orderby=["start/dateTime"],
            top=PAGE_SIZE,
        )
        config = CalendarViewRequestBuilder.CalendarViewRequestBuilderGetRequestConfiguration(
            query_parameters=query_params
        )
        # Return instants in the configured zone so date components are local
        config.headers.add("Prefer", f'outlook.timezone="{self.timezone}"')

        builder = self._calendars().by_calendar_id(calendar_id).calendar_view
        events: list[CalendarEvent] = []
        try:
            response = await builder.get(request_configuration=config)
            while response:
                events.extend(parse_event(event) for event in response.value or [])
                if not response.odata_next_link:
                    break
                response = await builder.with_url(response.odata_next_link).get(
                    request_configuration=config
                )
        except Exception as e:
            raise RemoteError(f"Could not fetch events from calendar {calendar_id}: {e}") from e

        logger.debug(
            "Fetched %d events from %s (%s to %s)", len(events), calendar_id, start_date, end_date
        )
        return events
