"""
Test configuration and fixtures for the reconciliation API test suite.

Provides:
- FastAPI TestClient fixture
- Factory functions for building XLSX uploads in memory
"""
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

GST_HEADERS = [
    "NAME", "GSTIN", "INVOICE NUMBER", "INVOICE DATE", "INVOICE VALUE", "TAX RATE",
    "TAXABLE VALUE", "IGST", "CGST", "SGST", "STATE OF SUPPLY",
]

SHEET_NAMES = {"A": "ACCOUNTS", "B": "COMPUTTAION", "C": "WINMAN DATA"}

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture()
def client():
    """Provide a FastAPI TestClient (lifespan included)."""
    from backend.api.main import app

    with TestClient(app) as c:
        yield c


# ---------------------------------------------------------------------------
# Factory functions
# ---------------------------------------------------------------------------

def make_invoice(number: str, value, name: str = "ACME TRADERS") -> list:
    """One GST invoice row in template column order."""
    return [name, "27AAACA1234A1Z5", number, "2024-04-01", value, 18, value, 0, 9, 9, "MH"]


def make_upload(sheet_name: str, rows: list[list], headers: list[str] = GST_HEADERS) -> bytes:
    """Build an XLSX upload with one sheet: header row then data rows."""
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name
    ws.append(headers)
    for row in rows:
        ws.append(row)
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def upload_files(rows_a: list[list], rows_b: list[list], rows_c: list[list]) -> dict:
    """Multipart `files` mapping for the upload endpoint."""
    return {
        "file_a": ("accounts.xlsx", make_upload(SHEET_NAMES["A"], rows_a), XLSX_MEDIA_TYPE),
        "file_b": ("computation.xlsx", make_upload(SHEET_NAMES["B"], rows_b), XLSX_MEDIA_TYPE),
        "file_c": ("winman.xlsx", make_upload(SHEET_NAMES["C"], rows_c), XLSX_MEDIA_TYPE),
    }
