"""
Conflict detection between computed entries and reports already in the ledger.
"""

from collections import defaultdict
from typing import Callable

from models.entries import (
    ConflictAction,
    ConflictResolution,
    DayCalculation,
    ExistingReport,
    TimeEntry,
)

# decide(date, proposed, existing) -> action
DecisionCallback = Callable[[str, list[TimeEntry], list[ExistingReport]], ConflictAction]


def reports_on(day: str, existing_reports: list[ExistingReport]) -> list[ExistingReport]:
    """Existing reports recorded on ``day``."""
    return [report for report in existing_reports if report.date == day]


def build_resolution(
    action: ConflictAction | str,
    proposed: list[TimeEntry],
    existing: list[ExistingReport],
) -> ConflictResolution:
    """
    Expand a decision into the entries to add and delete.

    - skip: nothing added, nothing deleted
    - replace: every existing report deleted, every proposed entry added
    - add: every proposed entry added, existing reports kept
    """
    action = ConflictAction(action)
    return ConflictResolution(
        action=action,
        entries_to_add=() if action == ConflictAction.SKIP else tuple(proposed),
        entries_to_delete=tuple(existing) if action == ConflictAction.REPLACE else (),
    )


class ConflictResolver:
    """Decide, per date, how computed entries are applied to the ledger."""

    def __init__(self, decide: DecisionCallback):
        self.decide = decide

    def resolve(
        self,
        calculations: list[DayCalculation],
        existing_reports: list[ExistingReport],
    ) -> dict[str, ConflictResolution]:
        """
        Map each date with proposed entries to its resolution.

        Dates without proposed entries are left out. Dates without existing
        reports are added without consulting the decision callback.
        """
        resolutions: dict[str, ConflictResolution] = {}
        for calc in calculations:
            if not calc.entries:
                continue
            proposed = list(calc.entries)
            existing = reports_on(calc.date, existing_reports)
            if existing:
                action = self.decide(calc.date, proposed, existing)
            else:
                action = ConflictAction.ADD
            resolutions[calc.date] = build_resolution(action, proposed, existing)
        return resolutions


def find_duplicates(reports: list[ExistingReport]) -> dict[str, list[list[ExistingReport]]]:
    """
    Group reports repeating the same project/task on the same date.

    Returns:
        date -> list of groups (each group has 2+ reports), dates ascending
    """
    groups: dict[tuple[str, str, str], list[ExistingReport]] = defaultdict(list)
    for report in reports:
        groups[(report.date, report.project, report.task)].append(report)

    duplicates: dict[str, list[list[ExistingReport]]] = defaultdict(list)
    for (day, _, _), group in sorted(groups.items()):
        if len(group) > 1:
            duplicates[day].append(sorted(group, key=lambda r: r.id))
    return dict(duplicates)
