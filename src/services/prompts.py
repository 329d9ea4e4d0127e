"""
Decision callbacks consulted when a date already has ledger reports.
"""

from typing import Callable

from core.conflicts import DecisionCallback
from models.entries import ConflictAction, ExistingReport, TimeEntry

CHOICES = {
    "s": (ConflictAction.SKIP, "Skip - Keep existing entries, do not add new ones"),
    "r": (ConflictAction.REPLACE, "Replace - Delete existing entries and add new ones"),
    "a": (ConflictAction.ADD, "Add - Keep existing entries and add new ones anyway"),
}


def format_entry(entry: TimeEntry | ExistingReport) -> str:
    """One-line rendering of a proposed entry or an existing report."""
    if isinstance(entry, TimeEntry):
        return (
            f"  - {entry.type.value}: {entry.duration}h "
            f"(Project: {entry.project}, Task: {entry.task})"
        )
    return f'  - {entry.project}/{entry.task}: {entry.hours:g}h - "{entry.note}"'


def prompt_conflict_resolution(
    day: str,
    proposed: list[TimeEntry],
    existing: list[ExistingReport],
    input_func: Callable[[str], str] = input,
    output_func: Callable[[str], None] = print,
) -> ConflictAction:
    """Show both sides of the conflict and ask the user what to do."""
    output_func(f"\nConflict detected for {day}:")
    output_func("\nExisting entries:")
    for report in existing:
        output_func(format_entry(report))
    output_func("\nNew entries to add:")
    for entry in proposed:
        output_func(format_entry(entry))

    output_func("\nWhat would you like to do?")
    for key, (_, label) in CHOICES.items():
        output_func(f"  [{key}] {label}")

    while True:
        answer = input_func("Choice [s/r/a]: ").strip().lower()
        if answer in CHOICES:
            return CHOICES[answer][0]
        for action, _ in CHOICES.values():
            if answer == action.value:
                return action
        output_func(f"Invalid choice '{answer}'.")


def fixed_decision(action: ConflictAction | str) -> DecisionCallback:
    """Policy callback that always answers with ``action``."""
    action = ConflictAction(action)

    def decide(day: str, proposed: list[TimeEntry], existing: list[ExistingReport]):
        return action

    return decide
