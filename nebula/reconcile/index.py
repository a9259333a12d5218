"""
Key Index - group a sheet's rows by match key.

Built once per sheet per run so every key lookup during matching is O(1):
- groups: match key -> rows with that key, in original sheet order
"""

from dataclasses import dataclass, field
from typing import Iterable

from .models import Row
from .normalize import build_key


@dataclass
class KeyIndex:
    """
    Rows of one sheet grouped by match key.

    Attributes:
        groups: Dict mapping key -> list of rows (first-seen key order)
        row_count: Total number of rows indexed
    """
    groups: dict[str, list[Row]] = field(default_factory=dict)
    row_count: int = 0

    def lookup(self, key: str) -> list[Row]:
        """Rows for a key, or an empty list if the sheet lacks it."""
        return self.groups.get(key, [])

    def keys(self) -> list[str]:
        return list(self.groups)

    def duplicate_keys(self) -> list[str]:
        """Keys held by more than one row."""
        return [key for key, rows in self.groups.items() if len(rows) > 1]


def build_key_index(rows: Iterable[Row], key_columns: list[str]) -> KeyIndex:
    """
    Build a key index for one sheet.

    Args:
        rows: Sheet rows in original order
        key_columns: Columns whose normalized values form the key

    Returns:
        KeyIndex preserving row order within each key
    """
    index = KeyIndex()

    for row in rows:
        key = build_key(row, key_columns)
        if key not in index.groups:
            index.groups[key] = []
        index.groups[key].append(row)
        index.row_count += 1

    return index


def merge_key_order(*indices: KeyIndex) -> list[str]:
    """Distinct keys across indices, first-seen order (A, then B, then C)."""
    seen: dict[str, None] = {}
    for index in indices:
        for key in index.groups:
            seen.setdefault(key, None)
    return list(seen)
