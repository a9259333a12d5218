"""
Sheet Loader - parse uploaded XLSX workbooks into SourceSheets.

The first row of the target sheet is the header row; every following row
becomes a dict of header -> normalized cell text. Fully empty rows are
dropped here so the engine never sees them. Columns with a blank header are
not read, and a header repeated in the row keeps only its first column.

Cells are rendered from their stored values, not from Excel's displayed
text: a number formatted as currency, such as 10.50, reads as "10.5", while
the same amount typed as text reads as "10.50". The two compare as a
mismatch.
"""

import logging
import zipfile
from datetime import date, datetime, time
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO, Optional, Union

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .config import TemplateSpec
from .errors import MalformedFile, SheetEmpty, SheetNotFound
from .models import Row, SourceSheet
from .normalize import normalize_value
from .validation import find_sheet_name, validate_file_type, validate_template_structure

logger = logging.getLogger(__name__)

WorkbookSource = Union[bytes, str, Path, BinaryIO]


def _open_workbook(source: WorkbookSource):
    """Open a workbook read-only from bytes, a path or a file object."""
    if isinstance(source, (bytes, bytearray)):
        source = BytesIO(source)
    try:
        return load_workbook(source, read_only=True, data_only=True)
    except FileNotFoundError:
        raise
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise MalformedFile(f"Failed to read workbook: {e}") from e


def _cell_text(value: Any) -> Any:
    """
    Render a typed cell the way it displays in Excel.

    openpyxl returns numbers and dates; sheets are compared as text.
    """
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


def get_sheet_names(source: WorkbookSource) -> list[str]:
    """List sheet names in a workbook."""
    workbook = _open_workbook(source)
    try:
        return list(workbook.sheetnames)
    finally:
        workbook.close()


def parse_sheet(
    source: WorkbookSource,
    expected_sheet_name: str,
    file_name: Optional[str] = None,
) -> SourceSheet:
    """
    Parse one sheet of a workbook.

    Args:
        source: XLSX bytes, path or binary file object
        expected_sheet_name: Sheet to read (matched case-insensitively)
        file_name: Original upload name (defaults to the path's name)

    Returns:
        SourceSheet with headers and non-empty rows

    Raises:
        SheetNotFound: sheet not in workbook
        SheetEmpty: sheet has no header row
        MalformedFile: workbook unreadable
    """
    if file_name is None:
        file_name = Path(source).name if isinstance(source, (str, Path)) else ""

    workbook = _open_workbook(source)
    try:
        sheet_name = find_sheet_name(workbook.sheetnames, expected_sheet_name)
        if sheet_name is None:
            raise SheetNotFound(f'Sheet "{expected_sheet_name}" not found')

        row_iter = workbook[sheet_name].iter_rows(values_only=True)
        header_values = next(row_iter, None)
        if header_values is None or all(normalize_value(v) is None for v in header_values):
            raise SheetEmpty("Sheet is empty")

        # Blank header cells are skipped; a repeated name keeps its first column
        columns: list[tuple[int, str]] = []
        for i, value in enumerate(header_values):
            header = normalize_value(_cell_text(value))
            if header is not None and all(header != name for _, name in columns):
                columns.append((i, header))
        headers = [name for _, name in columns]

        rows: list[Row] = []
        for values in row_iter:
            row: Row = {}
            for i, header in columns:
                value = values[i] if i < len(values) else None
                row[header] = normalize_value(_cell_text(value))
            # Skip completely empty rows
            if any(v is not None for v in row.values()):
                rows.append(row)
    finally:
        workbook.close()

    logger.info(f"Parsed {len(rows)} rows from {file_name or '<upload>'} [{sheet_name}]")

    return SourceSheet(name=sheet_name, file_name=file_name, headers=headers, rows=rows)


def load_source(
    source: WorkbookSource,
    template: TemplateSpec,
    file_name: Optional[str] = None,
    allowed_extensions: tuple[str, ...] = (".xlsx",),
    check_headers: bool = True,
) -> SourceSheet:
    """
    Validate and parse one upload against its template.

    Order: file type, sheet presence, parse, required headers. The first
    failure raises; nothing partial is returned. The file type check needs a
    name: it comes from file_name, a path, or a file object's name, and is
    skipped only when none of those is available.
    """
    if file_name is None:
        if isinstance(source, (str, Path)):
            file_name = Path(source).name
        elif getattr(source, "name", None):
            file_name = Path(source.name).name

    if file_name is not None:
        validate_file_type(file_name, allowed_extensions)

    # Read once; the workbook is opened twice below
    if isinstance(source, (str, Path)):
        data = Path(source).read_bytes()
    elif isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    else:
        data = source.read()

    sheet_names = get_sheet_names(data)
    validate_template_structure(sheet_names, [], template, check_headers=False)

    sheet = parse_sheet(data, template.sheet_name, file_name=file_name)
    if check_headers:
        validate_template_structure(sheet_names, sheet.headers, template)

    return sheet
