"""
Upload validation - gate between parsing and reconciliation.

Checks file type, expected sheet name and required headers against a
TemplateSpec. Sheet and header matching is case-insensitive.
"""

from typing import Iterable, Optional

from .config import TemplateSpec
from .errors import InvalidFileType, MissingHeaders, MissingSheet


def validate_file_type(file_name: str, allowed_extensions: Iterable[str] = (".xlsx",)) -> None:
    """Raise InvalidFileType unless the file name has an allowed extension."""
    allowed = [ext.lower() for ext in allowed_extensions]
    if not any(file_name.lower().endswith(ext) for ext in allowed):
        raise InvalidFileType(
            f"Only {', '.join(allowed)} files are accepted. Please upload a valid Excel file."
        )


def find_sheet_name(sheet_names: Iterable[str], expected_name: str) -> Optional[str]:
    """Actual sheet name matching expected_name case-insensitively, or None."""
    expected = expected_name.lower()
    for name in sheet_names:
        if name.lower() == expected:
            return name
    return None


def find_missing_headers(headers: Iterable[Optional[str]], required: Iterable[str]) -> list[str]:
    """Required headers not present in headers (case-insensitive)."""
    present = {h.lower() for h in headers if h}
    return [r for r in required if r.lower() not in present]


def validate_template_structure(
    sheet_names: list[str],
    headers: list[str],
    template: TemplateSpec,
    check_headers: bool = True,
) -> str:
    """
    Check an upload against its template.

    Args:
        sheet_names: All sheet names in the workbook
        headers: Parsed header row of the template's sheet
        template: Expected structure
        check_headers: False to only check the sheet name (headers not
            parsed yet)

    Returns:
        The actual (case-preserved) sheet name

    Raises:
        MissingSheet: expected sheet absent
        MissingHeaders: required headers absent
    """
    matched = find_sheet_name(sheet_names, template.sheet_name)
    if matched is None:
        raise MissingSheet(
            f'Expected sheet "{template.sheet_name}" not found. '
            f"Available sheets: {', '.join(sheet_names)}"
        )

    if check_headers:
        missing = find_missing_headers(headers, template.required_headers)
        if missing:
            raise MissingHeaders(missing)

    return matched
