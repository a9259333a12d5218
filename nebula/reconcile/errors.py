"""
Error taxonomy for reconciliation.

Everything here is raised before the engine runs (bad config, bad upload,
missing sheets). The engine itself never raises for a valid config.

All errors subclass ValueError so callers that already catch ValueError
keep working.
"""

from typing import Optional


class ReconcileError(ValueError):
    """Base error. Carries the offending field and a readable message."""
    field = "reconcile"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if field is not None:
            self.field = field

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class ConfigInvalid(ReconcileError):
    """Compare columns empty, or key-column lists inconsistently set."""
    field = "compareColumns"


class InputIncomplete(ReconcileError):
    """Fewer than three parsed sheets available."""
    field = "sheets"


class SheetNotFound(ReconcileError):
    """Requested sheet is not in the workbook."""
    field = "sheetName"


class SheetEmpty(ReconcileError):
    """Sheet exists but has no header row."""
    field = "sheet"


class MissingSheet(ReconcileError):
    """Template's expected sheet is not in the upload."""
    field = "sheetName"


class MissingHeaders(ReconcileError):
    """Upload is missing one or more required template headers."""
    field = "headers"

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required columns: {', '.join(self.missing)}")


class InvalidFileType(ReconcileError):
    field = "fileType"


class MalformedFile(ReconcileError):
    """Workbook could not be opened or read."""
    field = "parse"
