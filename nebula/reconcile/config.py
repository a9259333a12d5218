"""
Configuration for sheet reconciliation.

Two layers:
- Module config (reconcile_config.json): upload templates and export
  settings. Config is declarative JSON - edit the file, not the code.
- Run config (ReconcileConfig): compare and key columns for one run,
  validated here before the engine is invoked.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import ConfigInvalid
from .models import ReconcileConfig, SourceSheet

DEFAULT_CONFIG_PATH = Path(__file__).parent / "reconcile_config.json"


@dataclass
class TemplateSpec:
    """Expected layout of one uploaded source file."""
    key: str                    # "A", "B" or "C"
    file_name: str              # Downloadable template file name
    sheet_name: str             # Sheet that must exist in the upload
    display_name: str
    required_headers: list[str] = field(default_factory=list)


@dataclass
class ReconcileSettings:
    allowed_extensions: list[str] = field(default_factory=lambda: [".xlsx"])
    results_sheet_name: str = "Results"
    summary_title: str = "Reconciliation Summary"


@dataclass
class Config:
    """Full module configuration."""
    templates: dict[str, TemplateSpec] = field(default_factory=dict)
    settings: ReconcileSettings = field(default_factory=ReconcileSettings)


def load_config(config_path: str | Path | None = None) -> Config:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to reconcile_config.json (defaults to the
            module's bundled file)

    Returns:
        Config object with templates and settings
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    with open(path, "r") as f:
        data = json.load(f)

    header_sets = data.get("header_sets", {})

    templates = {}
    for key, template_data in data.get("templates", {}).items():
        headers = template_data.get("required_headers", [])
        # Named header set shared between templates
        if isinstance(headers, str):
            headers = header_sets.get(headers, [])
        templates[key] = TemplateSpec(
            key=key,
            file_name=template_data.get("file_name", f"Sheet{key}-template.xlsx"),
            sheet_name=template_data.get("sheet_name", key),
            display_name=template_data.get("display_name", f"Sheet {key}"),
            required_headers=list(headers),
        )

    settings_data = data.get("settings", {})
    settings = ReconcileSettings(
        allowed_extensions=settings_data.get("allowed_extensions", [".xlsx"]),
        results_sheet_name=settings_data.get("results_sheet_name", "Results"),
        summary_title=settings_data.get("summary_title", "Reconciliation Summary"),
    )

    return Config(templates=templates, settings=settings)


def get_template(config: Config, source_key: str) -> TemplateSpec:
    """
    Get the template for a source.

    Raises:
        KeyError: if the source key has no template
    """
    template = config.templates.get(source_key.upper())
    if template is None:
        raise KeyError(f"Unknown template: {source_key}")
    return template


def validate_reconcile_config(config: ReconcileConfig) -> None:
    """
    Reject a run config before it reaches the engine.

    Raises:
        ConfigInvalid: no compare columns, or key columns set for some
            sheets but not others
    """
    if not config.compare_columns:
        raise ConfigInvalid("At least one column must be available for comparison")

    key_lists = [config.key_columns_a, config.key_columns_b, config.key_columns_c]
    if any(key_lists) and not all(key_lists):
        missing = [name for name, keys in zip("ABC", key_lists) if not keys]
        raise ConfigInvalid(
            f"Key columns must be set for all sheets or none; missing for sheet {', '.join(missing)}",
            field="keyColumns",
        )


def common_headers(sheet_a: SourceSheet, sheet_b: SourceSheet, sheet_c: SourceSheet) -> list[str]:
    """Distinct non-blank headers present in all three sheets, in sheet A's order."""
    common: list[str] = []
    for header in sheet_a.headers:
        if not header or header in common:
            continue
        if header in sheet_b.headers and header in sheet_c.headers:
            common.append(header)
    return common


def build_reconcile_config(
    sheet_a: SourceSheet,
    sheet_b: SourceSheet,
    sheet_c: SourceSheet,
    compare_columns: Optional[list[str]] = None,
    key_columns: Optional[list[str]] = None,
    key_columns_a: Optional[list[str]] = None,
    key_columns_b: Optional[list[str]] = None,
    key_columns_c: Optional[list[str]] = None,
) -> ReconcileConfig:
    """
    Assemble a run config, filling defaults.

    Compare columns default to the headers common to all three sheets.
    A shared key_columns list applies to any sheet without its own list.
    Nothing is validated here; call validate_reconcile_config.
    """
    if not compare_columns:
        compare_columns = common_headers(sheet_a, sheet_b, sheet_c)

    shared = list(key_columns or [])
    return ReconcileConfig(
        compare_columns=list(compare_columns),
        key_columns_a=list(key_columns_a or shared),
        key_columns_b=list(key_columns_b or shared),
        key_columns_c=list(key_columns_c or shared),
    )
