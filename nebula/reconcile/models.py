"""
Data models for three-way sheet reconciliation.

Sheets A, B and C are expected to hold the same logical records. The engine
lines them up by match key (or by row position) and tags every aligned unit
with exactly one ReconcileStatus.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

Row = dict[str, Optional[str]]


class MatchMode(Enum):
    """How rows are aligned across the three sheets."""
    POSITIONAL = "positional"  # row N in A vs row N in B vs row N in C
    KEY_BASED = "key_based"    # rows with equal match keys


class ReconcileStatus(Enum):
    """
    Outcome for one aligned unit.

    Precedence when classifying (first hit wins):
    Duplicate > Missing in A > Missing in B > Missing in C > Mismatch > Matched
    """
    MATCHED = "Matched"
    MISMATCH = "Mismatch"
    MISSING_IN_A = "Missing in A"
    MISSING_IN_B = "Missing in B"
    MISSING_IN_C = "Missing in C"
    DUPLICATE = "Duplicate"


@dataclass
class SourceSheet:
    """One parsed input sheet."""
    name: str
    file_name: str
    headers: list[str] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass
class ReconcileConfig:
    """
    Which columns identify a record and which columns get compared.

    Empty key-column lists select positional matching. Each sheet has its
    own key list since the column names can differ; only the resulting key
    values need to line up.
    """
    compare_columns: list[str] = field(default_factory=list)
    key_columns_a: list[str] = field(default_factory=list)
    key_columns_b: list[str] = field(default_factory=list)
    key_columns_c: list[str] = field(default_factory=list)

    @property
    def mode(self) -> MatchMode:
        if self.key_columns_a or self.key_columns_b or self.key_columns_c:
            return MatchMode.KEY_BASED
        return MatchMode.POSITIONAL

    def key_columns_for(self, source: str) -> list[str]:
        """Key columns for source "a", "b" or "c"."""
        return getattr(self, f"key_columns_{source.lower()}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReconcileConfig":
        """Build from the camelCase wire shape."""
        return cls(
            compare_columns=list(data.get("compareColumns") or []),
            key_columns_a=list(data.get("keyColumnsA") or []),
            key_columns_b=list(data.get("keyColumnsB") or []),
            key_columns_c=list(data.get("keyColumnsC") or []),
        )

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "compareColumns": list(self.compare_columns),
            "keyColumnsA": list(self.key_columns_a),
            "keyColumnsB": list(self.key_columns_b),
            "keyColumnsC": list(self.key_columns_c),
        }


@dataclass(frozen=True)
class ResultRow:
    """
    One output unit of a reconciliation run.

    values_a/b/c hold the normalized compare-column values from each sheet,
    None where the sheet has no row at this occurrence. occurrence_index and
    total_occurrences are only set when a key holds more than one row in
    some sheet.
    """
    key: str
    status: ReconcileStatus
    present_in_a: bool
    present_in_b: bool
    present_in_c: bool
    values_a: Row = field(default_factory=dict)
    values_b: Row = field(default_factory=dict)
    values_c: Row = field(default_factory=dict)
    mismatches: tuple[str, ...] = ()
    occurrence_index: Optional[int] = None
    total_occurrences: Optional[int] = None

    @property
    def is_duplicate_occurrence(self) -> bool:
        return self.total_occurrences is not None


@dataclass
class ReconcileSummary:
    """Per-status counters for a run."""
    total: int = 0
    matched: int = 0
    mismatch: int = 0
    missing_in_a: int = 0
    missing_in_b: int = 0
    missing_in_c: int = 0
    duplicate: int = 0

    _FIELDS = {
        ReconcileStatus.MATCHED: "matched",
        ReconcileStatus.MISMATCH: "mismatch",
        ReconcileStatus.MISSING_IN_A: "missing_in_a",
        ReconcileStatus.MISSING_IN_B: "missing_in_b",
        ReconcileStatus.MISSING_IN_C: "missing_in_c",
        ReconcileStatus.DUPLICATE: "duplicate",
    }

    def record(self, status: ReconcileStatus) -> None:
        """Count one result row."""
        self.total += 1
        name = self._FIELDS[status]
        setattr(self, name, getattr(self, name) + 1)

    def count_for(self, status: ReconcileStatus) -> int:
        return getattr(self, self._FIELDS[status])

    def as_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "matched": self.matched,
            "mismatch": self.mismatch,
            "missingInA": self.missing_in_a,
            "missingInB": self.missing_in_b,
            "missingInC": self.missing_in_c,
            "duplicate": self.duplicate,
        }


@dataclass
class ReconciliationResult:
    """
    Full output of one run.

    The input sheets are kept by reference for display and export; the
    engine never modifies them.
    """
    rows: list[ResultRow]
    summary: ReconcileSummary
    config: ReconcileConfig
    mode: MatchMode
    sheet_a: SourceSheet
    sheet_b: SourceSheet
    sheet_c: SourceSheet
