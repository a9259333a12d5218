"""
Report Generator - Format reconciliation results for humans and files.

Produces console text, an XLSX results workbook, CSV, and a JSON-ready dict.
"""

import csv
import io
from datetime import datetime
from io import BytesIO
from typing import Any, TextIO

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from .matcher import group_results_by_status
from .models import ReconcileStatus, ReconciliationResult, ResultRow
from .normalize import display_key

SUMMARY_TITLE = "Reconciliation Summary"


def summary_rows(result: ReconciliationResult) -> list[list[Any]]:
    """Label/count pairs for the summary block."""
    s = result.summary
    return [
        ["Total Records", s.total],
        ["Matched", s.matched],
        ["Mismatch", s.mismatch],
        ["Missing in A", s.missing_in_a],
        ["Missing in B", s.missing_in_b],
        ["Missing in C", s.missing_in_c],
        ["Duplicate Keys", s.duplicate],
    ]


def table_header(result: ReconciliationResult) -> list[str]:
    header = [
        "Key",
        "Status",
        "Present in A",
        "Present in B",
        "Present in C",
        "Occurrence",
        "Mismatched Columns",
    ]
    for col in result.config.compare_columns:
        header.extend([f"{col} (A)", f"{col} (B)", f"{col} (C)"])
    return header


def _occurrence_label(row: ResultRow) -> str:
    if not row.is_duplicate_occurrence:
        return ""
    return f"{row.occurrence_index} of {row.total_occurrences}"


def table_row(row: ResultRow, compare_columns: list[str]) -> list[Any]:
    """One result row as flat cells."""
    cells: list[Any] = [
        display_key(row.key),
        row.status.value,
        "Yes" if row.present_in_a else "No",
        "Yes" if row.present_in_b else "No",
        "Yes" if row.present_in_c else "No",
        _occurrence_label(row),
        ", ".join(row.mismatches) or "None",
    ]
    for col in compare_columns:
        cells.extend([
            row.values_a.get(col) or "",
            row.values_b.get(col) or "",
            row.values_c.get(col) or "",
        ])
    return cells


def export_xlsx(
    result: ReconciliationResult,
    sheet_name: str = "Results",
    summary_title: str = SUMMARY_TITLE,
) -> BytesIO:
    """
    Write results to a single-sheet workbook.

    Layout: summary block, one blank row, then the results table.

    Returns:
        BytesIO buffer containing the Excel file
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name

    ws.append([summary_title])
    ws.cell(row=1, column=1).font = Font(bold=True)
    for row in summary_rows(result):
        ws.append(row)
    ws.append([])

    ws.append(table_header(result))
    header_row = ws.max_row
    for cell in ws[header_row]:
        cell.font = Font(bold=True)

    compare_columns = result.config.compare_columns
    for row in result.rows:
        ws.append(table_row(row, compare_columns))

    # Key, Status and Mismatched Columns get room; value columns stay narrow
    widths = [24, 14, 12, 12, 12, 12, 30] + [18] * (3 * len(compare_columns))
    for col_idx, width in enumerate(widths, 1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer


def export_csv(result: ReconciliationResult, output: TextIO | None = None) -> str:
    """
    Export the results table to CSV.

    Args:
        result: Reconciliation result
        output: Optional file handle to write to

    Returns:
        CSV string (also writes to output if provided)
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    writer.writerow(table_header(result))
    for row in result.rows:
        writer.writerow(table_row(row, result.config.compare_columns))

    csv_content = buffer.getvalue()

    if output:
        output.write(csv_content)

    return csv_content


def format_console(result: ReconciliationResult, show_matched: bool = False) -> str:
    """
    Format results for console display.

    Groups rows by status, most actionable first. Matched rows are hidden
    unless show_matched is set.
    """
    if not result.rows:
        return "No records to reconcile.\n"

    lines = []
    grouped = group_results_by_status(result.rows)
    order = [
        ReconcileStatus.MISMATCH,
        ReconcileStatus.DUPLICATE,
        ReconcileStatus.MISSING_IN_A,
        ReconcileStatus.MISSING_IN_B,
        ReconcileStatus.MISSING_IN_C,
        ReconcileStatus.MATCHED,
    ]

    for status in order:
        rows = grouped[status]
        if not rows or (status == ReconcileStatus.MATCHED and not show_matched):
            continue

        lines.append(f"\n{status.value.upper()} ({len(rows)})")
        lines.append("-" * 70)
        for r in rows:
            key = display_key(r.key) or "(blank key)"
            occurrence = f" [{_occurrence_label(r)}]" if r.is_duplicate_occurrence else ""
            detail = f"  -> {', '.join(r.mismatches)}" if r.mismatches else ""
            lines.append(f"{key:<30}{occurrence}{detail}")

    s = result.summary
    lines.append("\n" + "=" * 70)
    lines.append(f"SUMMARY ({result.mode.value})")
    lines.append(f"  Total records:  {s.total}")
    lines.append(f"  Matched:        {s.matched}")
    lines.append(f"  Mismatch:       {s.mismatch}")
    lines.append(f"  Missing in A:   {s.missing_in_a}")
    lines.append(f"  Missing in B:   {s.missing_in_b}")
    lines.append(f"  Missing in C:   {s.missing_in_c}")
    lines.append(f"  Duplicate:      {s.duplicate}")
    lines.append("=" * 70)

    return "\n".join(lines)


def _sheet_to_dict(sheet) -> dict[str, Any]:
    return {
        "name": sheet.name,
        "fileName": sheet.file_name,
        "headers": list(sheet.headers),
        "rows": list(sheet.rows),
    }


def result_to_dict(result: ReconciliationResult, include_sheets: bool = False) -> dict[str, Any]:
    """JSON-ready view of a result (camelCase keys)."""
    rows = []
    for r in result.rows:
        item = {
            "key": r.key,
            "displayKey": display_key(r.key),
            "status": r.status.value,
            "presentInA": r.present_in_a,
            "presentInB": r.present_in_b,
            "presentInC": r.present_in_c,
            "valuesA": dict(r.values_a),
            "valuesB": dict(r.values_b),
            "valuesC": dict(r.values_c),
            "mismatches": list(r.mismatches),
        }
        if r.is_duplicate_occurrence:
            item["occurrenceIndex"] = r.occurrence_index
            item["totalOccurrences"] = r.total_occurrences
        rows.append(item)

    data = {
        "mode": result.mode.value,
        "summary": result.summary.as_dict(),
        "config": result.config.to_dict(),
        "rows": rows,
    }
    if include_sheets:
        data["sheets"] = {
            "a": _sheet_to_dict(result.sheet_a),
            "b": _sheet_to_dict(result.sheet_b),
            "c": _sheet_to_dict(result.sheet_c),
        }
    return data


def generate_report_filename(extension: str = "xlsx") -> str:
    """
    Generate a filename for the results export.

    Returns:
        Filename like "Reconciliation_Results_2026-01-08T14-03-22.xlsx"
    """
    timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    return f"Reconciliation_Results_{timestamp}.{extension}"
