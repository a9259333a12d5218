"""
Pydantic request/response models for the API.
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional


# ============== Reconciliation ==============

class SheetPayload(BaseModel):
    """A sheet that was already parsed client-side."""
    name: str = ""
    fileName: str = ""
    headers: List[str] = Field(default_factory=list)
    rows: List[Dict[str, Optional[str]]] = Field(default_factory=list)


class ReconcileConfigPayload(BaseModel):
    compareColumns: List[str] = Field(default_factory=list)
    keyColumnsA: List[str] = Field(default_factory=list)
    keyColumnsB: List[str] = Field(default_factory=list)
    keyColumnsC: List[str] = Field(default_factory=list)


class ReconcileRequest(BaseModel):
    sheetA: Optional[SheetPayload] = None
    sheetB: Optional[SheetPayload] = None
    sheetC: Optional[SheetPayload] = None
    config: ReconcileConfigPayload = Field(default_factory=ReconcileConfigPayload)
    includeSheets: bool = False


class TemplateInfo(BaseModel):
    key: str
    fileName: str
    sheetName: str
    displayName: str
    requiredHeaders: List[str]


class ErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Body of a 400 raised from a ReconcileError."""
    detail: ErrorDetail
