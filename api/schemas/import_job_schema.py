"""
Schemas for background import jobs and their progress.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class ImportStatusEnum(str, Enum):
    QUEUED = 'queued'
    RUNNING = 'running'
    COMPLETED = 'completed'
    FAILED = 'failed'
    CANCELLED = 'cancelled'


class ImportProgressResponse(BaseModel):
    """Latest stage reported by the worker."""

    stage: str = Field(..., description="reading, importing, complete or failed")
    percent: float = Field(..., ge=0, le=100)
    message: Optional[str] = None
    rows_processed: Optional[int] = Field(None, description="Data rows read so far")
    recorded_at: datetime

    class Config:
        from_attributes = True


class ImportJobResponse(BaseModel):
    """
    State of one background import.

    Row counts are zero until the job completes.
    """

    job_id: str
    filename: str
    status: ImportStatusEnum
    requested_by: Optional[str] = None
    created_at: datetime
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    total_rows: int = 0
    imported_rows: int = 0
    skipped_rows: int = Field(0, description="Rows without a registered company name")
    failed_rows: int = Field(0, description="Rows rejected by validation")
    batches: int = 0
    warning_count: int = 0
    row_errors: Optional[List[str]] = Field(None, description="First formatted validation errors")

    error_message: Optional[str] = Field(None, description="Why the import stopped, if it failed")
    latest_progress: Optional[ImportProgressResponse] = None

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "job_id": "abc-123-def-456",
                "filename": "buyers.xlsx",
                "status": "completed",
                "created_at": "2025-10-15T12:00:00Z",
                "started_at": "2025-10-15T12:00:02Z",
                "finished_at": "2025-10-15T12:00:09Z",
                "total_rows": 1200,
                "imported_rows": 1180,
                "skipped_rows": 15,
                "failed_rows": 5,
                "batches": 3,
                "warning_count": 22,
                "row_errors": ['Row 17: The "Year Founded" must be a 4-digit year. '
                               '(Attribute: year_founded, Value: "99")'],
                "error_message": None,
                "latest_progress": {
                    "stage": "complete",
                    "percent": 100.0,
                    "message": "Import complete",
                    "rows_processed": 1200,
                    "recorded_at": "2025-10-15T12:00:09Z"
                }
            }
        }


class ImportJobListItem(BaseModel):
    job_id: str
    filename: str
    status: ImportStatusEnum
    created_at: datetime
    finished_at: Optional[datetime] = None
    imported_rows: int = 0
    failed_rows: int = 0

    class Config:
        from_attributes = True


class ImportJobListResponse(BaseModel):
    total: int
    page: int
    page_size: int
    total_pages: int
    items: List[ImportJobListItem]
