"""
Shared fixtures for reconciliation tests.

Provides:
- make_sheet: build a SourceSheet from plain dicts
- make_workbook: build XLSX bytes in memory with openpyxl
"""
from io import BytesIO
from typing import Optional

import pytest
from openpyxl import Workbook

from nebula.reconcile.config import load_config
from nebula.reconcile.models import SourceSheet


def build_sheet(rows: list[dict], name: str = "Sheet", headers: Optional[list[str]] = None) -> SourceSheet:
    if headers is None:
        headers = []
        for row in rows:
            for col in row:
                if col not in headers:
                    headers.append(col)
    return SourceSheet(name=name, file_name=f"{name}.xlsx", headers=headers, rows=rows)


def build_workbook(sheets: dict[str, list[list]]) -> bytes:
    """sheets: sheet name -> list of rows (first row is the header)."""
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_sheet():
    return build_sheet


@pytest.fixture
def make_workbook():
    return build_workbook


@pytest.fixture
def config():
    return load_config()
