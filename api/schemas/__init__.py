"""
Pydantic schemas for request/response validation.

This package contains all Pydantic models used for API request validation
and response serialization.
"""

from api.schemas.common import ErrorResponse, HealthCheckResponse
from api.schemas.import_job_schema import (
    ImportStatusEnum, ImportProgressResponse, ImportJobResponse,
    ImportJobListItem, ImportJobListResponse
)
from api.schemas.import_schema import (
    RowFailure, ImportSummary, ImportResultResponse, ImportStartResponse
)
from api.schemas.overview_schema import (
    CompanyOverviewListItem, CompanyOverviewDetail, CompanyOverviewListResponse
)

__all__ = [
    # Common
    'ErrorResponse',
    'HealthCheckResponse',

    # Background import jobs
    'ImportStatusEnum',
    'ImportProgressResponse',
    'ImportJobResponse',
    'ImportJobListItem',
    'ImportJobListResponse',

    # Import
    'RowFailure',
    'ImportSummary',
    'ImportResultResponse',
    'ImportStartResponse',

    # Company overviews
    'CompanyOverviewListItem',
    'CompanyOverviewDetail',
    'CompanyOverviewListResponse',
]
