"""
Reconciliation API router.

Handlers are plain `def` so FastAPI runs them in its thread pool; the
engine is synchronous and CPU-bound.
"""
import json
import logging
import re
from enum import Enum
from functools import lru_cache
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse

from backend.api.models import ErrorResponse, ReconcileRequest, TemplateInfo
from backend.core.config import settings
from nebula.reconcile import (
    InputIncomplete,
    ReconcileConfig,
    ReconcileError,
    SourceSheet,
    build_reconcile_config,
    create_template_workbook,
    export_xlsx,
    get_template,
    load_config,
    load_source,
    result_to_dict,
    run_reconciliation,
)
from nebula.reconcile.report import generate_report_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reconcile", tags=["Reconcile"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

ERROR_RESPONSES = {400: {"model": ErrorResponse, "description": "Upload or config rejected"}}


class ResultFormat(str, Enum):
    """Response format options."""
    JSON = "json"
    XLSX = "xlsx"


@lru_cache
def get_reconcile_config():
    """Module config, loaded once."""
    return load_config(settings.RECONCILE_CONFIG_PATH or None)


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe use in Content-Disposition header."""
    safe = re.sub(r'[^\w\s\-\.]', '_', filename)
    return quote(safe, safe='')


def _xlsx_response(buffer, filename: str) -> StreamingResponse:
    safe_filename = sanitize_filename(filename)

    def iterfile():
        yield buffer.getvalue()

    return StreamingResponse(
        iterfile(),
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f"attachment; filename=\"{safe_filename}\"; filename*=UTF-8''{safe_filename}"
        }
    )


def _split_columns(value: Optional[str]) -> list[str]:
    """Parse a form field holding a JSON list or comma-separated names."""
    if not value or not value.strip():
        return []
    value = value.strip()
    if value.startswith("["):
        try:
            items = json.loads(value)
        except json.JSONDecodeError:
            raise HTTPException(status_code=400, detail={"field": "columns", "message": f"Invalid column list: {value}"})
        return [str(item).strip() for item in items if str(item).strip()]
    return [part.strip() for part in value.split(",") if part.strip()]


def _read_upload(upload: UploadFile) -> bytes:
    # One byte past the limit is enough to reject without buffering the rest
    content = upload.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"{upload.filename} exceeds the {settings.MAX_UPLOAD_BYTES} byte upload limit"
        )
    return content


def _respond(result, format: ResultFormat, include_sheets: bool = False):
    if format == ResultFormat.XLSX:
        cfg = get_reconcile_config().settings
        buffer = export_xlsx(result, sheet_name=cfg.results_sheet_name, summary_title=cfg.summary_title)
        return _xlsx_response(buffer, generate_report_filename("xlsx"))
    return result_to_dict(result, include_sheets=include_sheets)


# ============== Templates ==============

@router.get("/templates")
def list_templates():
    """List the expected upload layout for sheets A, B and C."""
    config = get_reconcile_config()
    templates = [
        TemplateInfo(
            key=t.key,
            fileName=t.file_name,
            sheetName=t.sheet_name,
            displayName=t.display_name,
            requiredHeaders=t.required_headers,
        ).model_dump()
        for _, t in sorted(config.templates.items())
    ]
    return {"templates": templates, "count": len(templates)}


@router.get("/templates/{source_key}")
def download_template(source_key: str):
    """Download a blank XLSX template for one source."""
    try:
        template = get_template(get_reconcile_config(), source_key)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown template: {source_key}")

    return _xlsx_response(create_template_workbook(template), template.file_name)


# ============== Validation ==============

@router.post("/validate", responses=ERROR_RESPONSES)
def validate_upload(
    file: UploadFile = File(...),
    source_key: str = Form(...),
    skip_header_check: bool = Form(False),
):
    """Validate one upload against its template and report what was parsed."""
    config = get_reconcile_config()
    try:
        template = get_template(config, source_key)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown template: {source_key}")

    try:
        sheet = load_source(
            _read_upload(file),
            template,
            file_name=file.filename or "",
            allowed_extensions=tuple(config.settings.allowed_extensions),
            check_headers=not skip_header_check,
        )
    except ReconcileError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())

    return {
        "valid": True,
        "sourceKey": template.key,
        "sheetName": sheet.name,
        "fileName": sheet.file_name,
        "headers": sheet.headers,
        "rowCount": sheet.row_count,
    }


# ============== Reconciliation ==============

@router.post("/upload", responses=ERROR_RESPONSES)
def reconcile_upload(
    file_a: Optional[UploadFile] = File(None),
    file_b: Optional[UploadFile] = File(None),
    file_c: Optional[UploadFile] = File(None),
    compare_columns: Optional[str] = Form(None),
    key_columns: Optional[str] = Form(None),
    key_columns_a: Optional[str] = Form(None),
    key_columns_b: Optional[str] = Form(None),
    key_columns_c: Optional[str] = Form(None),
    skip_header_check: bool = Form(False),
    format: ResultFormat = Query(ResultFormat.JSON, description="Response format"),
):
    """
    Reconcile three uploaded workbooks.

    Compare columns default to the headers shared by all three sheets.
    Leave every key column field empty for positional matching.
    """
    config = get_reconcile_config()
    uploads = {"A": file_a, "B": file_b, "C": file_c}

    try:
        sheets: dict[str, Optional[SourceSheet]] = {}
        for key, upload in uploads.items():
            if upload is None:
                sheets[key] = None
                continue
            sheets[key] = load_source(
                _read_upload(upload),
                get_template(config, key),
                file_name=upload.filename or "",
                allowed_extensions=tuple(config.settings.allowed_extensions),
                check_headers=not skip_header_check,
            )

        missing = [key for key, sheet in sheets.items() if sheet is None]
        if missing:
            raise InputIncomplete(
                f"All three files must be uploaded before reconciliation; missing sheet {', '.join(missing)}"
            )

        run_config = build_reconcile_config(
            sheets["A"], sheets["B"], sheets["C"],
            compare_columns=_split_columns(compare_columns),
            key_columns=_split_columns(key_columns),
            key_columns_a=_split_columns(key_columns_a),
            key_columns_b=_split_columns(key_columns_b),
            key_columns_c=_split_columns(key_columns_c),
        )

        result = run_reconciliation(sheets["A"], sheets["B"], sheets["C"], run_config)
    except ReconcileError as e:
        logger.info(f"Reconcile upload rejected: {e.field}: {e.message}")
        raise HTTPException(status_code=400, detail=e.to_dict())

    return _respond(result, format)


@router.post("", responses=ERROR_RESPONSES)
def reconcile_sheets(
    request: ReconcileRequest,
    format: ResultFormat = Query(ResultFormat.JSON, description="Response format"),
):
    """Reconcile sheets that were parsed client-side."""

    def to_sheet(payload, default_name: str) -> Optional[SourceSheet]:
        if payload is None:
            return None
        return SourceSheet(
            name=payload.name or default_name,
            file_name=payload.fileName,
            headers=list(payload.headers),
            rows=[dict(row) for row in payload.rows],
        )

    sheet_a = to_sheet(request.sheetA, "A")
    sheet_b = to_sheet(request.sheetB, "B")
    sheet_c = to_sheet(request.sheetC, "C")
    run_config = ReconcileConfig.from_dict(request.config.model_dump())

    try:
        result = run_reconciliation(sheet_a, sheet_b, sheet_c, run_config)
    except ReconcileError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())

    return _respond(result, format, include_sheets=request.includeSheets)
