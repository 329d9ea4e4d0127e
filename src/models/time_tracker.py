"""Pydantic models for the time tracker HTTP API."""

from pydantic import BaseModel, ConfigDict, Field

from models.entries import ExistingReport


class ApiModel(BaseModel):
    """Lenient base: ids and durations arrive as numbers or strings."""

    model_config = ConfigDict(coerce_numbers_to_str=True, populate_by_name=True, extra="ignore")


class LoginResponse(ApiModel):
    token: str


class TimeReport(ApiModel):
    """A single ledger record."""

    id: int
    project: str
    task: str
    date: str = ""
    start: str | None = None
    finish: str | None = None
    note: str | None = None
    duration: float = 0.0

    def to_existing(self, day: str | None = None) -> ExistingReport:
        """
        Convert to an ExistingReport.

        ``day`` is the date the report was queried for and wins over the
        server's own date field, which is not always plain yyyy-mm-dd.
        """
        return ExistingReport(
            id=self.id,
            project=self.project,
            task=self.task,
            date=day or self.date.split("T")[0],
            hours=self.duration,
            note=self.note or "",
        )


class DailyReports(ApiModel):
    """Reports for one date plus the ledger's running totals."""

    reports: list[TimeReport] = []
    day_total: str | None = Field(None, alias="dayTotal")
    month_total: str | None = Field(None, alias="monthTotal")
    quota: str | None = None
    remaining_quota: str | None = Field(None, alias="remainingQuota")


class Task(ApiModel):
    id: str
    name: str = ""


class Project(ApiModel):
    id: str
    name: str = ""
    tasks: list[Task] = []

    def has_task(self, task_id: str) -> bool:
        return any(task.id == task_id for task in self.tasks)
