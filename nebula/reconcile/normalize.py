"""
Cell normalization and match-key construction.

A normalized cell is either trimmed, non-empty text or None. Empty strings
never survive normalization, so "" and None compare equal afterwards.
"""

from typing import Any, Iterable, Mapping, Optional

# ASCII unit separator - never part of spreadsheet business data
KEY_SEPARATOR = "\x1f"


def normalize_value(value: Any) -> Optional[str]:
    """Convert any raw value to trimmed text, collapsing empty to None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def build_key(row: Mapping[str, Any], key_columns: Iterable[str]) -> str:
    """
    Build the match key for a row.

    Each key column is normalized (absent -> "") and the parts are joined
    with KEY_SEPARATOR. A row with no key data yields a key made only of
    separators, which still groups with other such rows.
    """
    parts = []
    for column in key_columns:
        parts.append(normalize_value(row.get(column)) or "")
    return KEY_SEPARATOR.join(parts)


def position_key(index: int) -> str:
    """Match key for positional mode: 1-based row ordinal."""
    return str(index + 1)


def display_key(key: str) -> str:
    """Readable form of a composite key."""
    return key.replace(KEY_SEPARATOR, " | ")
