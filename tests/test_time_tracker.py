import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from core.config import LedgerTargets
from core.conflicts import ConflictResolver
from core.errors import (
    AuthenticationError,
    ConfigurationError,
    NotFoundError,
    RemoteError,
    ValidationError,
)
from models.entries import ConflictAction, DayCalculation, EntryType, TimeEntry
from models.time_tracker import Project, Task
from services.time_tracker import TimeTrackerClient, check_targets, entry_payload

TOKEN = "secret-token"


def _authorized(request):
    if request.headers.get("Authorization") != f"Bearer {TOKEN}":
        raise web.HTTPUnauthorized(
            text='{"error": "Unauthorized"}', content_type="application/json"
        )


class FakeTracker:
    """In-memory time tracker API."""

    def __init__(self):
        self.added = []
        self.deleted = []
        self.edited = []
        self.reports = {
            "2025-11-20": [
                {"id": 501, "project": "14", "task": "13", "duration": "9", "note": "Planning"},
                {"id": "502", "project": 938, "task": 5, "duration": 0.5, "note": None},
            ]
        }

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/login", self.login)
        app.router.add_get("/health", self.health)
        app.router.add_get("/time/reports", self.time_reports)
        app.router.add_get("/user/reports", self.user_reports)
        app.router.add_post("/time/add", self.add)
        app.router.add_post("/time/delete", self.delete)
        app.router.add_post("/time/edit", self.edit)
        app.router.add_get("/user/projects", self.projects)
        return app

    async def health(self, request):
        return web.json_response({"status": "ok"})

    async def login(self, request):
        body = await request.json()
        if body.get("password") != "hunter2":
            return web.json_response({"error": "Invalid credentials"}, status=400)
        return web.json_response({"token": TOKEN})

    async def time_reports(self, request):
        _authorized(request)
        day = request.query["date"]
        return web.json_response(
            {
                "reports": self.reports.get(day, []),
                "dayTotal": "9.5",
                "monthTotal": 120,
                "quota": "180",
                "remainingQuota": "60",
            }
        )

    async def user_reports(self, request):
        _authorized(request)
        if "yearMonth" in request.query:
            return web.Response(text="<html>maintenance</html>", status=502)
        reports = [
            {**report, "date": day}
            for day, items in sorted(self.reports.items())
            if request.query["startDate"] <= day <= request.query["endDate"]
            for report in items
        ]
        return web.json_response(reports)

    async def add(self, request):
        _authorized(request)
        body = await request.json()
        if body["task"] != "13":
            return web.json_response({"error": "Task not found in project"}, status=400)
        self.added.append(body)
        return web.json_response({"success": True, "id": 900})

    async def edit(self, request):
        _authorized(request)
        body = await request.json()
        self.edited.append(body)
        return web.json_response({"success": True})

    async def delete(self, request):
        _authorized(request)
        body = await request.json()
        if body["id"] != "501":
            return web.json_response({"error": "Report not found"}, status=404)
        self.deleted.append(body["id"])
        return web.json_response({"success": True})

    async def projects(self, request):
        _authorized(request)
        return web.json_response(
            [
                {"id": 14, "name": "Internal", "tasks": [{"id": 13, "name": "Meetings"}]},
                {"id": "938", "name": "Client", "tasks": [{"id": "5", "name": "Development"}]},
            ]
        )


@pytest.fixture
async def tracker_url():
    server = TestServer(FakeTracker().app())
    await server.start_server()
    yield str(server.make_url("")).rstrip("/")
    await server.close()


@pytest.fixture
async def tracker():
    fake = FakeTracker()
    server = TestServer(fake.app())
    await server.start_server()
    async with TimeTrackerClient(str(server.make_url(""))) as client:
        await client.login("me@example.com", "hunter2")
        yield client, fake
    await server.close()


def _meeting(task="13"):
    return TimeEntry(
        date="2025-11-24", project="14", task=task, hours=7.5, note="Meetings: Standup",
        type=EntryType.MEETING,
    )


def test_missing_url_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        TimeTrackerClient("")


def test_entry_payload_sends_duration_as_text():
    assert entry_payload(_meeting()) == {
        "date": "2025-11-24",
        "project": "14",
        "task": "13",
        "duration": "7.5",
        "start": "",
        "finish": "",
        "note": "Meetings: Standup",
    }


@pytest.mark.anyio
async def test_login_keeps_token(tracker_url):
    async with TimeTrackerClient(tracker_url) as client:
        assert await client.login("me@example.com", "hunter2") == TOKEN
        assert client.token == TOKEN


@pytest.mark.anyio
async def test_bad_credentials(tracker_url):
    async with TimeTrackerClient(tracker_url) as client:
        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            await client.login("me@example.com", "wrong")


@pytest.mark.anyio
async def test_calls_before_login_are_rejected(tracker_url):
    async with TimeTrackerClient(tracker_url) as client:
        assert (await client.health()) == {"status": "ok"}
        with pytest.raises(AuthenticationError):
            await client.get_existing_reports("2025-11-20")


@pytest.mark.anyio
async def test_expired_token(tracker_url):
    async with TimeTrackerClient(tracker_url, token="stale") as client:
        with pytest.raises(AuthenticationError) as excinfo:
            await client.get_projects()
    assert excinfo.value.status == 401


@pytest.mark.anyio
async def test_daily_reports(tracker):
    client, _ = tracker
    daily = await client.get_reports_for_date("2025-11-20")

    assert daily.day_total == "9.5"
    assert daily.month_total == "120"
    assert daily.remaining_quota == "60"
    assert [r.id for r in daily.reports] == [501, 502]


@pytest.mark.anyio
async def test_existing_reports_are_normalized(tracker):
    client, _ = tracker
    reports = await client.get_existing_reports("2025-11-20")

    assert [(r.id, r.project, r.task, r.date, r.hours, r.note) for r in reports] == [
        (501, "14", "13", "2025-11-20", 9.0, "Planning"),
        (502, "938", "5", "2025-11-20", 0.5, ""),
    ]


@pytest.mark.anyio
async def test_no_reports(tracker):
    client, _ = tracker
    assert await client.get_existing_reports("2025-11-21") == []


@pytest.mark.anyio
async def test_user_reports_for_range(tracker):
    client, _ = tracker
    reports = await client.get_user_reports("2025-11-01", "2025-11-30")
    assert [r.date for r in reports] == ["2025-11-20", "2025-11-20"]


@pytest.mark.anyio
async def test_server_error_is_a_remote_error(tracker):
    client, _ = tracker
    with pytest.raises(RemoteError) as excinfo:
        await client.get_reports_for_month("2025-11")
    assert excinfo.value.status == 502
    assert not isinstance(excinfo.value, ValidationError)


@pytest.mark.anyio
async def test_add_entry(tracker):
    client, fake = tracker
    await client.add_entry(_meeting())
    assert fake.added[0]["duration"] == "7.5"
    assert fake.added[0]["project"] == "14"


@pytest.mark.anyio
async def test_rejected_entry_is_a_validation_error(tracker):
    client, fake = tracker
    with pytest.raises(ValidationError, match="Task not found in project") as excinfo:
        await client.add_entry(_meeting(task="99"))
    assert excinfo.value.status == 400
    assert fake.added == []


@pytest.mark.anyio
async def test_delete_entry(tracker):
    client, fake = tracker
    await client.delete_entry(501)
    assert fake.deleted == ["501"]


@pytest.mark.anyio
async def test_delete_missing_entry(tracker):
    client, _ = tracker
    with pytest.raises(NotFoundError):
        await client.delete_entry(777)


@pytest.mark.anyio
async def test_unreachable_ledger():
    # Nothing listens on port 9 (discard)
    async with TimeTrackerClient("http://127.0.0.1:9", timeout_seconds=2) as client:
        client.token = TOKEN
        with pytest.raises(RemoteError):
            await client.get_projects()


@pytest.mark.anyio
async def test_projects_and_target_check(tracker):
    client, _ = tracker
    projects = await client.get_projects()

    assert [p.id for p in projects] == ["14", "938"]
    targets = LedgerTargets(
        internal_project="14", meeting_task="13", leave_task="8",
        client_project="938", client_task="5",
    )
    assert check_targets(targets, projects) == ["leave: task '8' not found in project '14'"]


def test_check_targets_unknown_project():
    projects = [Project(id="14", tasks=[Task(id="13"), Task(id="8")])]
    targets = LedgerTargets(
        internal_project="14", meeting_task="13", leave_task="8",
        client_project="938", client_task="5",
    )
    assert check_targets(targets, projects) == ["client: project '938' not found"]


@pytest.mark.anyio
async def test_edit_entry(tracker):
    client, fake = tracker
    await client.edit_entry(501, _meeting())
    assert fake.edited == [
        {
            "id": "501",
            "date": "2025-11-24",
            "project": "14",
            "task": "13",
            "duration": "7.5",
            "start": "",
            "finish": "",
            "note": "Meetings: Standup",
        }
    ]


@pytest.mark.anyio
async def test_reports_carry_the_queried_date(tracker, sample_entry):
    client, fake = tracker
    fake.reports["2025-11-20"] = [
        {"id": 501, "project": "14", "task": "13", "duration": "9", "date": "2025-11-20T00:00:00"}
    ]
    existing = await client.get_existing_reports("2025-11-20")
    assert [r.date for r in existing] == ["2025-11-20"]

    decisions = []

    def decide(day, proposed, reports):
        decisions.append(day)
        return ConflictAction.SKIP

    calcs = [DayCalculation(date="2025-11-20", entries=(sample_entry,))]
    resolution = ConflictResolver(decide).resolve(calcs, existing)["2025-11-20"]

    assert decisions == ["2025-11-20"]
    assert resolution.action == ConflictAction.SKIP
    assert resolution.entries_to_add == ()
