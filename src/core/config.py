"""
Configuration constants and environment setup.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from core.errors import ConfigurationError

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = PROJECT_ROOT / "data" / "db" / "timesync.db"
OUTPUT_DIR = PROJECT_ROOT / "output"

# =============================================================================
# MS GRAPH CREDENTIALS (from environment)
# =============================================================================

GRAPH_TENANT_ID = os.environ.get("MICROSOFT_GRAPH_TENANT_ID", "")
GRAPH_APP_ID = os.environ.get("MICROSOFT_GRAPH_APP_ID", "")
GRAPH_CLIENT_SECRET = os.environ.get("MICROSOFT_GRAPH_CLIENT_SECRET", "")

# =============================================================================
# CALENDAR CONFIGURATION
# =============================================================================

CALENDAR_USER_ID = os.environ.get("CALENDAR_USER_ID", "")  # e.g., "me@example.com"
WORK_CALENDAR_ID = os.environ.get("WORK_CALENDAR_ID", "")
HOLIDAY_CALENDAR_ID = os.environ.get("HOLIDAY_CALENDAR_ID", "")
CALENDAR_TIMEZONE = os.environ.get("CALENDAR_TIMEZONE", "UTC")

# =============================================================================
# TIME TRACKER (LEDGER) CONFIGURATION
# =============================================================================

TIME_TRACKER_API_URL = os.environ.get("TIME_TRACKER_API_URL", "")
TIME_TRACKER_EMAIL = os.environ.get("TIME_TRACKER_EMAIL", "")
TIME_TRACKER_PASSWORD = os.environ.get("TIME_TRACKER_PASSWORD", "")
TIME_TRACKER_TIMEOUT_SECONDS = float(os.environ.get("TIME_TRACKER_TIMEOUT_SECONDS", "30"))

# Project/task identifiers in the ledger
INTERNAL_PROJECT_ID = os.environ.get("INTERNAL_PROJECT_ID", "14")
MEETING_TASK_ID = os.environ.get("MEETING_TASK_ID", "13")
LEAVE_TASK_ID = os.environ.get("LEAVE_TASK_ID", "8")
CLIENT_PROJECT_ID = os.environ.get("CLIENT_PROJECT_ID", "")  # no sensible default
CLIENT_TASK_ID = os.environ.get("CLIENT_TASK_ID", "5")

# =============================================================================
# WORKDAY CONFIGURATION
# =============================================================================

WORKDAY_HOURS = float(os.environ.get("WORKDAY_HOURS", "9"))

# ISO weekday numbers (Monday=1 ... Sunday=7)
WEEKEND_DAYS = frozenset(
    int(day) for day in os.environ.get("WEEKEND_DAYS", "5,6").split(",") if day.strip()
)

OFFICE_PRESENCE_TERMS = ("working from office", "wfo")
LEAVE_TERMS = ("vacation", "pto", "paid time off")

# Holiday calendar entries the organization treats as full days off
# (most entries on a holiday calendar are NOT days off)
DAY_OFF_HOLIDAYS = (
    "Rosh Hashana",
    "Rosh Hashanah",
    "Yom Kippur",
    "Sukkot",
    "Pesach",
    "Passover",
    "Yom HaAtzmaut",
    "Yom Ha'atzmaut",
    "Independence Day",
)

# =============================================================================
# EMAIL CONFIGURATION
# =============================================================================

SYNC_FROM_EMAIL = os.environ.get("SYNC_FROM_EMAIL", "")
SYNC_REPORT_EMAIL = os.environ.get("SYNC_REPORT_EMAIL", "")


# =============================================================================
# INJECTED POLICY
# =============================================================================


@dataclass(frozen=True)
class ClassificationPolicy:
    """Keyword vocabularies and work-week convention used by the pipeline."""

    office_presence_terms: tuple[str, ...] = OFFICE_PRESENCE_TERMS
    leave_terms: tuple[str, ...] = LEAVE_TERMS
    holiday_names: tuple[str, ...] = DAY_OFF_HOLIDAYS
    weekend_days: frozenset[int] = WEEKEND_DAYS


@dataclass(frozen=True)
class LedgerTargets:
    """Project and task identifiers each kind of entry is booked against."""

    internal_project: str = INTERNAL_PROJECT_ID
    meeting_task: str = MEETING_TASK_ID
    leave_task: str = LEAVE_TASK_ID
    client_project: str = CLIENT_PROJECT_ID
    client_task: str = CLIENT_TASK_ID

    def validate(self) -> None:
        """Raise ConfigurationError if any identifier is unset."""
        missing = [name for name, value in vars(self).items() if not str(value).strip()]
        if missing:
            raise ConfigurationError(
                f"Ledger identifiers not configured: {', '.join(sorted(missing))}"
            )


DEFAULT_POLICY = ClassificationPolicy()
DEFAULT_TARGETS = LedgerTargets()

_SETTING_VALUES = {
    "MICROSOFT_GRAPH_TENANT_ID": GRAPH_TENANT_ID,
    "MICROSOFT_GRAPH_APP_ID": GRAPH_APP_ID,
    "MICROSOFT_GRAPH_CLIENT_SECRET": GRAPH_CLIENT_SECRET,
    "CALENDAR_USER_ID": CALENDAR_USER_ID,
    "WORK_CALENDAR_ID": WORK_CALENDAR_ID,
    "HOLIDAY_CALENDAR_ID": HOLIDAY_CALENDAR_ID,
    "TIME_TRACKER_API_URL": TIME_TRACKER_API_URL,
    "TIME_TRACKER_EMAIL": TIME_TRACKER_EMAIL,
    "TIME_TRACKER_PASSWORD": TIME_TRACKER_PASSWORD,
    "CLIENT_PROJECT_ID": CLIENT_PROJECT_ID,
    "SYNC_FROM_EMAIL": SYNC_FROM_EMAIL,
    "SYNC_REPORT_EMAIL": SYNC_REPORT_EMAIL,
}


def require_settings(*names: str) -> None:
    """
    Fail fast when required environment settings are missing.

    Raises:
        ConfigurationError: naming every missing variable
    """
    missing = [name for name in names if not _SETTING_VALUES.get(name)]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variable(s): {', '.join(missing)}. "
            "Set them in the environment or a .env file."
        )
