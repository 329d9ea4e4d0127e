"""
Excel preview of a sync run: the computed plan and the decided resolutions.
"""

from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from models.entries import ConflictResolution, DayCalculation

PLAN_HEADERS = ["Date", "Day Type", "Entry Type", "Project", "Task", "Hours", "Note"]
RESOLUTION_HEADERS = ["Date", "Action", "Entries to Add", "Hours to Add", "Reports to Delete", "Hours to Delete"]


def day_type(calc: DayCalculation) -> str:
    """Label for how the day was classified."""
    if calc.is_holiday:
        return "Holiday"
    if calc.is_weekend:
        return "Weekend"
    if calc.is_office_presence:
        return "Office"
    if calc.is_leave:
        return "Leave"
    return "Workday"


def _write_headers(ws, headers: list[str]):
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)


def _autosize(ws):
    for col_idx, column in enumerate(ws.columns, start=1):
        width = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
        ws.column_dimensions[get_column_letter(col_idx)].width = min(max(width + 2, 10), 60)


def write_plan_sheet(ws, calculations: list[DayCalculation]):
    """
    One row per computed entry; days without entries get a single row
    with the day type only.
    """
    _write_headers(ws, PLAN_HEADERS)

    row_idx = 2
    for calc in calculations:
        if not calc.entries:
            ws.cell(row=row_idx, column=1, value=calc.date)
            ws.cell(row=row_idx, column=2, value=day_type(calc))
            row_idx += 1
            continue
        for entry in calc.entries:
            row_data = [
                calc.date,
                day_type(calc),
                entry.type.value,
                entry.project,
                entry.task,
                entry.hours,
                entry.note,
            ]
            for col_idx, value in enumerate(row_data, start=1):
                ws.cell(row=row_idx, column=col_idx, value=value)
            row_idx += 1


def write_resolutions_sheet(ws, resolutions: dict[str, ConflictResolution]):
    _write_headers(ws, RESOLUTION_HEADERS)

    for row_idx, day in enumerate(sorted(resolutions), start=2):
        resolution = resolutions[day]
        row_data = [
            day,
            resolution.action.value,
            len(resolution.entries_to_add),
            sum(e.hours for e in resolution.entries_to_add),
            len(resolution.entries_to_delete),
            sum(r.hours for r in resolution.entries_to_delete),
        ]
        for col_idx, value in enumerate(row_data, start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)


def create_sync_preview(
    calculations: list[DayCalculation],
    resolutions: dict[str, ConflictResolution],
    output_path: Path,
) -> Path:
    """
    Create Excel preview with two sheets.

    Sheet 1: "Plan" - what should be booked per day
    Sheet 2: "Resolutions" - how each day would be applied to the ledger
    """
    wb = Workbook()

    ws_plan = wb.active
    ws_plan.title = "Plan"
    write_plan_sheet(ws_plan, calculations)
    _autosize(ws_plan)

    ws_resolutions = wb.create_sheet(title="Resolutions")
    write_resolutions_sheet(ws_resolutions, resolutions)
    _autosize(ws_resolutions)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(output_path))
    return output_path
