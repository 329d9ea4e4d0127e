"""
Time tracker (ledger) HTTP client.

Thin async wrapper over the REST API: login, read reports, add/edit/delete
entries, list projects. Errors are translated into the core.errors hierarchy
and never retried here.
"""

import logging

import aiohttp
from pydantic import ValidationError as PydanticValidationError

from core.config import TIME_TRACKER_API_URL, TIME_TRACKER_TIMEOUT_SECONDS, LedgerTargets
from core.errors import (
    AuthenticationError,
    ConfigurationError,
    NotFoundError,
    RemoteError,
    ValidationError,
)
from models.entries import ExistingReport, TimeEntry
from models.time_tracker import DailyReports, LoginResponse, Project, TimeReport

logger = logging.getLogger(__name__)


def _error_for_status(status: int, message: str, details: object) -> RemoteError:
    if status in (400, 422):
        return ValidationError(message, status, details)
    if status == 404:
        return NotFoundError(message, status, details)
    if status in (401, 403):
        return AuthenticationError(message, status, details)
    return RemoteError(message, status, details)


def entry_payload(entry: TimeEntry) -> dict:
    """Request body for /time/add; duration is sent as text."""
    return {
        "date": entry.date,
        "project": entry.project,
        "task": entry.task,
        "duration": entry.duration,
        "start": "",
        "finish": "",
        "note": entry.note,
    }


class TimeTrackerClient:
    """
    Async client for the time tracker API.

    Use as an async context manager:

        async with TimeTrackerClient(url) as ledger:
            await ledger.login(email, password)
            daily = await ledger.get_reports_for_date("2025-11-24")
    """

    def __init__(
        self,
        base_url: str = TIME_TRACKER_API_URL,
        timeout_seconds: float = TIME_TRACKER_TIMEOUT_SECONDS,
        token: str | None = None,
    ):
        if not base_url:
            raise ConfigurationError("TIME_TRACKER_API_URL is not set")
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.token = token
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "TimeTrackerClient":
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _auth_headers(self) -> dict:
        if not self.token:
            raise AuthenticationError("Not authenticated. Please login first.")
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
        auth: bool = True,
    ):
        if self._session is None:
            raise RemoteError("Client not connected (use 'async with')")
        headers = self._auth_headers() if auth else {}
        url = f"{self.base_url}{path}"
        try:
            async with self._session.request(
                method, url, json=json, params=params, headers=headers
            ) as response:
                if response.content_type == "application/json":
                    body = await response.json()
                else:
                    body = await response.text()
                if response.status >= 400:
                    message = body.get("error") if isinstance(body, dict) else None
                    raise _error_for_status(
                        response.status,
                        f"{method} {path} failed ({response.status}): {message or body}",
                        body,
                    )
                return body
        except aiohttp.ClientError as e:
            raise RemoteError(f"{method} {path} failed: {e}") from e
        except TimeoutError as e:
            raise RemoteError(f"{method} {path} timed out after {self.timeout_seconds}s") from e
        except ValueError as e:
            raise RemoteError(f"{method} {path} returned malformed JSON: {e}") from e

    # -------------------------------------------------------------------------
    # API
    # -------------------------------------------------------------------------

    async def health(self) -> dict:
        return await self._request("GET", "/health", auth=False)

    async def login(self, email: str, password: str) -> str:
        """Authenticate and keep the bearer token for later calls."""
        try:
            body = await self._request(
                "POST", "/login", json={"email": email, "password": password}, auth=False
            )
        except (ValidationError, NotFoundError) as e:
            raise AuthenticationError(f"Login failed: {e}", e.status, e.details) from e
        try:
            self.token = LoginResponse.model_validate(body).token
        except PydanticValidationError as e:
            raise AuthenticationError(f"Login failed: unexpected response {body!r}") from e
        logger.info("Authenticated with time tracker as %s", email)
        return self.token

    async def get_reports_for_date(self, day: str) -> DailyReports:
        """Reports recorded on ``day`` along with day/month totals."""
        body = await self._request("GET", "/time/reports", params={"date": day})
        try:
            return DailyReports.model_validate(body)
        except PydanticValidationError as e:
            raise RemoteError(f"Malformed reports response for {day}: {e}") from e

    async def get_existing_reports(self, day: str) -> list[ExistingReport]:
        daily = await self.get_reports_for_date(day)
        return [report.to_existing(day) for report in daily.reports]

    async def get_user_reports(self, start_date: str, end_date: str) -> list[ExistingReport]:
        body = await self._request(
            "GET", "/user/reports", params={"startDate": start_date, "endDate": end_date}
        )
        return self._parse_report_list(body)

    async def get_reports_for_month(self, year_month: str) -> list[ExistingReport]:
        body = await self._request("GET", "/user/reports", params={"yearMonth": year_month})
        return self._parse_report_list(body)

    async def add_entry(self, entry: TimeEntry) -> dict:
        """
        Create a ledger record.

        Raises:
            ValidationError: malformed fields or unknown project/task
        """
        return await self._request("POST", "/time/add", json=entry_payload(entry))

    async def edit_entry(self, report_id: int, entry: TimeEntry) -> dict:
        payload = {"id": str(report_id), **entry_payload(entry)}
        return await self._request("POST", "/time/edit", json=payload)

    async def delete_entry(self, report_id: int) -> dict:
        """
        Delete a ledger record.

        Raises:
            NotFoundError: the id no longer exists
        """
        return await self._request("POST", "/time/delete", json={"id": str(report_id)})

    async def get_projects(self) -> list[Project]:
        body = await self._request("GET", "/user/projects")
        try:
            return [Project.model_validate(item) for item in body]
        except (PydanticValidationError, TypeError) as e:
            raise RemoteError(f"Malformed projects response: {e}") from e

    @staticmethod
    def _parse_report_list(body) -> list[ExistingReport]:
        try:
            return [TimeReport.model_validate(item).to_existing() for item in body]
        except (PydanticValidationError, TypeError) as e:
            raise RemoteError(f"Malformed reports response: {e}") from e


def check_targets(targets: LedgerTargets, projects: list[Project]) -> list[str]:
    """Problems with configured project/task identifiers, empty if all exist."""
    by_id = {project.id: project for project in projects}
    problems = []
    pairs = [
        ("meeting", targets.internal_project, targets.meeting_task),
        ("leave", targets.internal_project, targets.leave_task),
        ("client", targets.client_project, targets.client_task),
    ]
    for label, project_id, task_id in pairs:
        project = by_id.get(project_id)
        if project is None:
            problems.append(f"{label}: project '{project_id}' not found")
        elif not project.has_task(task_id):
            problems.append(f"{label}: task '{task_id}' not found in project '{project_id}'")
    return problems
