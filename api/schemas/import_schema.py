"""
Import-related Pydantic schemas.

This module contains schemas for company overview spreadsheet imports.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class RowFailure(BaseModel):
    """Validation failure for one column of one row."""

    row: int = Field(..., description="Spreadsheet row number (heading row is 1)")
    attribute: str = Field(..., description="Column that failed validation")
    errors: List[str] = Field(..., description="Validation messages")
    value: Optional[Any] = Field(None, description="Offending cell value")


class ImportSummary(BaseModel):
    """Outcome of one spreadsheet import."""

    total_rows: int = Field(..., description="Non-blank data rows read")
    imported: int = Field(..., description="Records inserted")
    skipped: int = Field(..., description="Rows skipped for a missing registered name")
    failed: int = Field(..., description="Rows rejected by validation")
    batches: int = Field(..., description="Bulk insert batches committed")
    failures: List[RowFailure] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list, description="Formatted failure messages")
    error_count: int = Field(0, description="Column failures, including any left out of errors")
    warnings: List[Dict[str, Any]] = Field(default_factory=list, description="First coercion warnings")
    warning_count: int = Field(0, description="Coercion warnings raised")
    import_timestamp: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "total_rows": 3,
                "imported": 1,
                "skipped": 1,
                "failed": 1,
                "batches": 1,
                "failures": [{
                    "row": 4,
                    "attribute": "year_founded",
                    "errors": ['The "Year Founded" must be a 4-digit year.'],
                    "value": "99"
                }],
                "errors": ['Row 4: The "Year Founded" must be a 4-digit year. '
                           '(Attribute: year_founded, Value: "99")'],
                "error_count": 1,
                "warnings": [],
                "warning_count": 0,
                "import_timestamp": "2025-10-15T12:00:00"
            }
        }


class ImportResultResponse(BaseModel):
    """Response of the synchronous import endpoint."""

    message: str = Field(..., description="Outcome message")
    errors: List[str] = Field(default_factory=list, description="Row failures, if any")
    summary: ImportSummary


class ImportStartResponse(BaseModel):
    """Returned by the upload endpoint once the worker has the job."""

    job_id: str = Field(..., description="Celery task id")
    message: str = "Company overview import job started"
    status_url: str
    websocket_url: str

    class Config:
        json_schema_extra = {
            "example": {
                "job_id": "abc-123-def-456",
                "message": "Company overview import job started",
                "status_url": "/api/import/job/abc-123-def-456",
                "websocket_url": "/ws/import/abc-123-def-456"
            }
        }
