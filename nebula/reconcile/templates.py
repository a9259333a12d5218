"""
Template workbooks - blank upload files for Sheets A, B and C.

Each template is one sheet, named per its TemplateSpec, with the required
headers in row 1. Users fill these in and upload them back.
"""

import logging
from io import BytesIO
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from .config import Config, TemplateSpec

logger = logging.getLogger(__name__)


def create_template_workbook(template: TemplateSpec) -> BytesIO:
    """
    Create a blank upload template.

    Returns:
        BytesIO buffer containing the Excel file
    """
    wb = Workbook()
    ws = wb.active
    ws.title = template.sheet_name

    ws.append(template.required_headers)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for col_idx, header in enumerate(template.required_headers, 1):
        ws.column_dimensions[get_column_letter(col_idx)].width = max(12, len(header) + 4)

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer


def write_templates(config: Config, out_dir: str | Path) -> list[Path]:
    """Write every configured template into out_dir."""
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    written = []
    for key in sorted(config.templates):
        template = config.templates[key]
        path = out / template.file_name
        path.write_bytes(create_template_workbook(template).getvalue())
        written.append(path)
        logger.info(f"Wrote template {template.display_name} -> {path}")

    return written
