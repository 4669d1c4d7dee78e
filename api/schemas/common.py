"""
Error and health payloads shared by every router.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class ErrorResponse(BaseModel):
    """Body returned for exceptions no endpoint handled."""

    error: str
    detail: Optional[Dict[str, Any]] = Field(None, description="Exception text, only in DEBUG")
    path: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class HealthCheckResponse(BaseModel):
    """
    Reachability of the stores an import needs.

    ``status`` is "ok" when both answer and "degraded" otherwise.
    """

    status: str
    version: str
    database: bool = Field(..., description="SELECT 1 succeeded")
    redis: bool = Field(..., description="PING succeeded")

    class Config:
        json_schema_extra = {
            "example": {"status": "ok", "version": "1.0.0", "database": True, "redis": True}
        }
