"""
Data models for ledger entries, per-day computations and conflict resolutions.

Durations are floats everywhere inside the pipeline. They are turned into the
ledger's text encoding only by ``TimeEntry.duration``.
"""

from dataclasses import dataclass, field
from enum import Enum


class EntryType(str, Enum):
    """Semantic tag of a proposed ledger entry."""

    MEETING = "meeting"
    LEAVE = "leave"
    OFFICE_PRESENCE = "office-presence"


class ConflictAction(str, Enum):
    """How a day with proposed entries is applied to the ledger."""

    SKIP = "skip"
    REPLACE = "replace"
    ADD = "add"


def round_hours(hours: float) -> float:
    """Round to 2 decimal places."""
    return round(hours + 0.0, 2)


def format_hours(hours: float) -> str:
    """
    Encode hours the way the ledger expects them.

    Whole numbers have no fractional part ("9", "7"), others keep up to two
    decimals ("0.5", "7.25").
    """
    rounded = round_hours(hours)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.2f}".rstrip("0")


@dataclass(frozen=True)
class TimeEntry:
    """A proposed ledger write (not yet persisted)."""

    date: str  # yyyy-mm-dd
    project: str
    task: str
    hours: float
    note: str
    type: EntryType

    @property
    def duration(self) -> str:
        """Hours as the string the ledger API takes."""
        return format_hours(self.hours)


@dataclass(frozen=True)
class ExistingReport:
    """A record already persisted in the ledger."""

    id: int
    project: str
    task: str
    date: str
    hours: float
    note: str = ""


@dataclass(frozen=True)
class DayCalculation:
    """What should be booked for one calendar date."""

    date: str
    is_holiday: bool = False
    is_office_presence: bool = False
    is_leave: bool = False
    meeting_hours: float = 0.0
    office_hours: float = 0.0
    entries: tuple[TimeEntry, ...] = field(default_factory=tuple)
    is_weekend: bool = False


@dataclass(frozen=True)
class ConflictResolution:
    """Ledger mutations decided for one date."""

    action: ConflictAction
    entries_to_add: tuple[TimeEntry, ...] = field(default_factory=tuple)
    entries_to_delete: tuple[ExistingReport, ...] = field(default_factory=tuple)
