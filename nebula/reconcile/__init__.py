# Three-way sheet reconciliation
# Siloed module - no imports from other Nebula components

from .models import (
    Row,
    SourceSheet,
    MatchMode,
    ReconcileStatus,
    ReconcileConfig,
    ResultRow,
    ReconcileSummary,
    ReconciliationResult,
)
from .errors import (
    ReconcileError,
    ConfigInvalid,
    InputIncomplete,
    SheetNotFound,
    SheetEmpty,
    MissingSheet,
    MissingHeaders,
    InvalidFileType,
    MalformedFile,
)
from .normalize import normalize_value, build_key, KEY_SEPARATOR
from .config import (
    Config,
    TemplateSpec,
    load_config,
    get_template,
    validate_reconcile_config,
    build_reconcile_config,
    common_headers,
)
from .index import build_key_index, KeyIndex
from .matcher import reconcile, run_reconciliation, find_mismatched_columns, filter_results
from .sheet_loader import parse_sheet, get_sheet_names, load_source
from .validation import validate_template_structure, validate_file_type
from .report import export_xlsx, export_csv, format_console, result_to_dict
from .templates import create_template_workbook

__version__ = "1.0.0"

__all__ = [
    # Models
    "Row",
    "SourceSheet",
    "MatchMode",
    "ReconcileStatus",
    "ReconcileConfig",
    "ResultRow",
    "ReconcileSummary",
    "ReconciliationResult",
    # Errors
    "ReconcileError",
    "ConfigInvalid",
    "InputIncomplete",
    "SheetNotFound",
    "SheetEmpty",
    "MissingSheet",
    "MissingHeaders",
    "InvalidFileType",
    "MalformedFile",
    # Normalization
    "normalize_value",
    "build_key",
    "KEY_SEPARATOR",
    # Config
    "Config",
    "TemplateSpec",
    "load_config",
    "get_template",
    "validate_reconcile_config",
    "build_reconcile_config",
    "common_headers",
    # Index
    "build_key_index",
    "KeyIndex",
    # Engine
    "reconcile",
    "run_reconciliation",
    "find_mismatched_columns",
    "filter_results",
    # Parsing / validation
    "parse_sheet",
    "get_sheet_names",
    "load_source",
    "validate_template_structure",
    "validate_file_type",
    # Report
    "export_xlsx",
    "export_csv",
    "format_console",
    "result_to_dict",
    "create_template_workbook",
]
