"""
Reconciliation Engine - three-way sheet comparison.

Aligns rows from Sheets A, B and C and classifies each aligned unit:

| Dup key? | In A? | In B? | In C? | Values equal? | Result       |
|----------|-------|-------|-------|---------------|--------------|
| ✓        | -     | -     | -     | -             | Duplicate    |
| ✗        | ✗     | -     | -     | -             | Missing in A |
| ✗        | ✓     | ✗     | -     | -             | Missing in B |
| ✗        | ✓     | ✓     | ✗     | -             | Missing in C |
| ✗        | ✓     | ✓     | ✓     | ✗             | Mismatch     |
| ✗        | ✓     | ✓     | ✓     | ✓             | Matched      |

Two alignment modes, picked once per run from the config:
- Key-based: rows with the same match key are the same record. Duplicate
  holders of a key are paired by their order within the key, not by content.
- Positional: row N of each sheet is the same record. Duplicate is never
  produced since positions are unique.
"""

import logging
from typing import Iterable, Optional

from .config import validate_reconcile_config
from .errors import InputIncomplete
from .index import build_key_index, merge_key_order
from .models import (
    MatchMode,
    ReconcileConfig,
    ReconcileStatus,
    ReconcileSummary,
    ReconciliationResult,
    ResultRow,
    Row,
    SourceSheet,
)
from .normalize import display_key, normalize_value, position_key

logger = logging.getLogger(__name__)

_EMPTY_ROW: Row = {}


def reconcile(
    sheet_a: SourceSheet,
    sheet_b: SourceSheet,
    sheet_c: SourceSheet,
    config: ReconcileConfig,
) -> ReconciliationResult:
    """
    Reconcile three sheets.

    Args:
        sheet_a, sheet_b, sheet_c: Parsed sheets (not modified)
        config: Validated run config

    Returns:
        ReconciliationResult with one ResultRow per aligned unit
    """
    mode = config.mode
    if mode is MatchMode.KEY_BASED:
        rows = _reconcile_by_key(sheet_a, sheet_b, sheet_c, config)
    else:
        rows = _reconcile_by_position(sheet_a, sheet_b, sheet_c, config)

    summary = summarize_results(rows)
    logger.info(
        f"Reconciled {sheet_a.row_count}/{sheet_b.row_count}/{sheet_c.row_count} rows "
        f"({mode.value}): {summary.as_dict()}"
    )

    return ReconciliationResult(
        rows=rows,
        summary=summary,
        config=config,
        mode=mode,
        sheet_a=sheet_a,
        sheet_b=sheet_b,
        sheet_c=sheet_c,
    )


def run_reconciliation(
    sheet_a: Optional[SourceSheet],
    sheet_b: Optional[SourceSheet],
    sheet_c: Optional[SourceSheet],
    config: ReconcileConfig,
) -> ReconciliationResult:
    """
    Check preconditions, then reconcile.

    Raises:
        ConfigInvalid: config rejected (engine not invoked)
        InputIncomplete: fewer than three sheets supplied
    """
    validate_reconcile_config(config)

    if sheet_a is None or sheet_b is None or sheet_c is None:
        raise InputIncomplete(
            "All three files must be uploaded and validated before reconciliation"
        )

    return reconcile(sheet_a, sheet_b, sheet_c, config)


def _reconcile_by_key(
    sheet_a: SourceSheet,
    sheet_b: SourceSheet,
    sheet_c: SourceSheet,
    config: ReconcileConfig,
) -> list[ResultRow]:
    index_a = build_key_index(sheet_a.rows, config.key_columns_a)
    index_b = build_key_index(sheet_b.rows, config.key_columns_b)
    index_c = build_key_index(sheet_c.rows, config.key_columns_c)

    results = []
    for key in merge_key_order(index_a, index_b, index_c):
        rows_a = index_a.lookup(key)
        rows_b = index_b.lookup(key)
        rows_c = index_c.lookup(key)

        duplicated = len(rows_a) > 1 or len(rows_b) > 1 or len(rows_c) > 1
        occurrences = max(len(rows_a), len(rows_b), len(rows_c))
        if duplicated:
            logger.debug(
                f"Duplicate key {display_key(key)!r}: "
                f"A={len(rows_a)} B={len(rows_b)} C={len(rows_c)}"
            )

        for i in range(occurrences):
            results.append(_build_result_row(
                key,
                rows_a[i] if i < len(rows_a) else None,
                rows_b[i] if i < len(rows_b) else None,
                rows_c[i] if i < len(rows_c) else None,
                config.compare_columns,
                duplicated=duplicated,
                occurrence_index=i + 1 if occurrences > 1 else None,
                total_occurrences=occurrences if occurrences > 1 else None,
            ))

    return results


def _reconcile_by_position(
    sheet_a: SourceSheet,
    sheet_b: SourceSheet,
    sheet_c: SourceSheet,
    config: ReconcileConfig,
) -> list[ResultRow]:
    rows_a, rows_b, rows_c = sheet_a.rows, sheet_b.rows, sheet_c.rows
    total = max(len(rows_a), len(rows_b), len(rows_c))

    return [
        _build_result_row(
            position_key(i),
            rows_a[i] if i < len(rows_a) else None,
            rows_b[i] if i < len(rows_b) else None,
            rows_c[i] if i < len(rows_c) else None,
            config.compare_columns,
        )
        for i in range(total)
    ]


def _build_result_row(
    key: str,
    row_a: Optional[Row],
    row_b: Optional[Row],
    row_c: Optional[Row],
    compare_columns: list[str],
    duplicated: bool = False,
    occurrence_index: Optional[int] = None,
    total_occurrences: Optional[int] = None,
) -> ResultRow:
    """Classify one aligned unit. A None row means the sheet lacks it."""
    present_a, present_b, present_c = row_a is not None, row_b is not None, row_c is not None

    mismatches: list[str] = []
    if not duplicated and present_a and present_b and present_c:
        mismatches = find_mismatched_columns(row_a, row_b, row_c, compare_columns)

    return ResultRow(
        key=key,
        status=classify(present_a, present_b, present_c, duplicated, mismatches),
        present_in_a=present_a,
        present_in_b=present_b,
        present_in_c=present_c,
        values_a=_compare_values(row_a, compare_columns),
        values_b=_compare_values(row_b, compare_columns),
        values_c=_compare_values(row_c, compare_columns),
        mismatches=tuple(mismatches),
        occurrence_index=occurrence_index,
        total_occurrences=total_occurrences,
    )


def _compare_values(row: Optional[Row], compare_columns: list[str]) -> Row:
    source = row if row is not None else _EMPTY_ROW
    return {col: normalize_value(source.get(col)) for col in compare_columns}


def classify(
    present_a: bool,
    present_b: bool,
    present_c: bool,
    duplicated: bool,
    mismatches: list[str],
) -> ReconcileStatus:
    """Apply status precedence. First matching rule wins."""
    if duplicated:
        return ReconcileStatus.DUPLICATE
    if not present_a:
        return ReconcileStatus.MISSING_IN_A
    if not present_b:
        return ReconcileStatus.MISSING_IN_B
    if not present_c:
        return ReconcileStatus.MISSING_IN_C
    if mismatches:
        return ReconcileStatus.MISMATCH
    return ReconcileStatus.MATCHED


def find_mismatched_columns(
    row_a: Row,
    row_b: Row,
    row_c: Row,
    compare_columns: Iterable[str],
) -> list[str]:
    """
    Compare columns whose normalized values are not equal across A, B and C.

    Missing cells normalize to None, and None only equals None.
    Returned in compare_columns order.
    """
    mismatches = []
    for col in compare_columns:
        v_a = normalize_value(row_a.get(col))
        v_b = normalize_value(row_b.get(col))
        v_c = normalize_value(row_c.get(col))
        if not (v_a == v_b == v_c):
            mismatches.append(col)
    return mismatches


def summarize_results(results: list[ResultRow]) -> ReconcileSummary:
    """Count result rows per status."""
    summary = ReconcileSummary()
    for result in results:
        summary.record(result.status)
    return summary


def filter_results(
    results: list[ResultRow],
    status: Optional[ReconcileStatus] = None,
    search: Optional[str] = None,
) -> list[ResultRow]:
    """
    Narrow results for display.

    Args:
        status: Keep only this status (None keeps all)
        search: Case-insensitive substring of the displayed key, used as typed
    """
    filtered = results
    if status is not None:
        filtered = [r for r in filtered if r.status == status]
    if search:
        needle = search.lower()
        filtered = [r for r in filtered if needle in display_key(r.key).lower()]
    return filtered


def filter_actionable(results: list[ResultRow]) -> list[ResultRow]:
    """Everything that is not Matched."""
    return [r for r in results if r.status != ReconcileStatus.MATCHED]


def group_results_by_status(results: list[ResultRow]) -> dict[ReconcileStatus, list[ResultRow]]:
    """Group result rows by status, statuses in enum order."""
    grouped: dict[ReconcileStatus, list[ResultRow]] = {status: [] for status in ReconcileStatus}
    for result in results:
        grouped[result.status].append(result)
    return grouped
