from datetime import date
from types import SimpleNamespace

import pytest

from core.errors import RemoteError
from models.events import EventTime
from services import calendar as calendar_module
from services.calendar import GraphCalendarSource, parse_event


def _graph_event(
    subject="Standup",
    start="2025-11-24T09:00:00.0000000",
    end="2025-11-24T09:30:00.0000000",
    is_all_day=False,
    body=None,
    event_id="AAMk-1",
):
    return SimpleNamespace(
        id=event_id,
        subject=subject,
        is_all_day=is_all_day,
        start=SimpleNamespace(date_time=start, time_zone="Asia/Jerusalem"),
        end=SimpleNamespace(date_time=end, time_zone="Asia/Jerusalem"),
        body=SimpleNamespace(content=body) if body is not None else None,
        organizer=SimpleNamespace(email_address=SimpleNamespace(address="lead@example.com")),
        attendees=[
            SimpleNamespace(email_address=SimpleNamespace(address="me@example.com")),
            SimpleNamespace(email_address=None),
        ],
    )


def test_parse_timed_event():
    event = parse_event(_graph_event(body="<p>Daily sync</p><p>Room 3</p>"))

    assert event.id == "AAMk-1"
    assert event.summary == "Standup"
    assert event.start == EventTime(date_time="2025-11-24T09:00:00.0000000")
    assert event.day == "2025-11-24"
    assert event.description == "Daily sync\nRoom 3"
    assert event.organizer == "lead@example.com"
    assert event.attendees == ("me@example.com",)


def test_parse_all_day_event_is_date_only():
    event = parse_event(
        _graph_event(
            subject="Yom Kippur",
            start="2025-10-02T00:00:00.0000000",
            end="2025-10-03T00:00:00.0000000",
            is_all_day=True,
        )
    )
    assert event.start == EventTime(date="2025-10-02")
    assert event.end == EventTime(date="2025-10-03")


def test_parse_event_without_subject_or_times():
    raw = _graph_event()
    raw.subject = None
    raw.start = None
    event = parse_event(raw)
    assert event.summary == ""
    assert event.start == EventTime()
    assert event.description is None


class FakeCalendarView:
    def __init__(self, pages, fail=False):
        self.pages = pages
        self.fail = fail
        self.configs = []
        self.urls = []

    async def get(self, request_configuration=None):
        self.configs.append(request_configuration)
        if self.fail:
            raise RuntimeError("503 Service Unavailable")
        return self.pages[len(self.urls)]

    def with_url(self, url):
        self.urls.append(url)
        return self


class FakeCalendars:
    def __init__(self, view, calendars=()):
        self.view = view
        self.calendars = calendars
        self.calendar_ids = []

    async def get(self):
        return SimpleNamespace(value=list(self.calendars))

    def by_calendar_id(self, calendar_id):
        self.calendar_ids.append(calendar_id)
        return SimpleNamespace(calendar_view=self.view)


def _install_graph(monkeypatch, calendars):
    users = SimpleNamespace(by_user_id=lambda user_id: SimpleNamespace(calendars=calendars))
    monkeypatch.setattr(calendar_module, "get_graph_client", lambda: SimpleNamespace(users=users))


@pytest.mark.anyio
async def test_list_events_follows_pages(monkeypatch):
    pages = [
        SimpleNamespace(value=[_graph_event(event_id="1")], odata_next_link="https://graph/next"),
        SimpleNamespace(value=[_graph_event(event_id="2")], odata_next_link=None),
    ]
    view = FakeCalendarView(pages)
    calendars = FakeCalendars(view)
    _install_graph(monkeypatch, calendars)

    source = GraphCalendarSource("me@example.com", "Asia/Jerusalem")
    events = await source.list_events("work-cal", date(2025, 11, 1), date(2025, 11, 30))

    assert [e.id for e in events] == ["1", "2"]
    assert calendars.calendar_ids == ["work-cal"]
    assert view.urls == ["https://graph/next"]
    params = view.configs[0].query_parameters
    assert params.start_date_time == "2025-11-01T00:00:00+02:00"
    assert params.end_date_time == "2025-12-01T00:00:00+02:00"


@pytest.mark.anyio
async def test_list_events_wraps_graph_errors(monkeypatch):
    _install_graph(monkeypatch, FakeCalendars(FakeCalendarView([], fail=True)))

    source = GraphCalendarSource("me@example.com", "UTC")
    with pytest.raises(RemoteError, match="work-cal"):
        await source.list_events("work-cal", date(2025, 11, 24), date(2025, 11, 24))


@pytest.mark.anyio
async def test_find_calendar_id(monkeypatch):
    calendars = [
        SimpleNamespace(id="cal-1", name="Calendar"),
        SimpleNamespace(id="cal-2", name="Holidays in Israel"),
    ]
    _install_graph(monkeypatch, FakeCalendars(FakeCalendarView([]), calendars))

    source = GraphCalendarSource("me@example.com", "UTC")
    assert await source.find_calendar_id("holidays in israel") == "cal-2"
    assert await source.find_calendar_id("Birthdays") is None
