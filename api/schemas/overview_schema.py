"""
Company overview Pydantic schemas.

Read-only views of imported buyer company overview records.
"""

from typing import Any, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class CompanyOverviewListItem(BaseModel):
    """Overview list item for paginated list responses."""

    id: int = Field(..., description="Record ID")
    reg_name: Optional[str] = Field(None, description="Registered company name")
    hq_country: Optional[str] = None
    company_type: Optional[str] = None
    year_founded: Optional[int] = None
    main_industry_operations: Optional[List[Any]] = None
    status: Optional[str] = None
    created_at: datetime = Field(..., description="Import timestamp")

    class Config:
        from_attributes = True


class CompanyOverviewDetail(BaseModel):
    """Full company overview record."""

    id: int
    reg_name: Optional[str] = None
    hq_country: Optional[str] = None
    company_type: Optional[str] = None
    year_founded: Optional[int] = None
    industry_ops: Optional[str] = None
    main_industry_operations: Optional[List[Any]] = None
    niche_industry: Optional[List[Any]] = None
    emp_count: Optional[str] = None
    reason_ma: Optional[str] = None
    proj_start_date: Optional[str] = None
    txn_timeline: Optional[str] = None
    incharge_name: Optional[str] = None
    no_pic_needed: Optional[bool] = None
    status: Optional[str] = None
    details: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    hq_address: Optional[Any] = Field(None, description="Structured address or {full_address_string}")
    shareholder_name: Optional[List[Any]] = None
    seller_contact_name: Optional[str] = None
    seller_designation: Optional[str] = None
    seller_email: Optional[str] = None
    seller_phone: Optional[List[Any]] = None
    website: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    youtube: Optional[str] = None
    ebitda_times: Optional[Any] = Field(None, description="EBITDA multiples")
    import_job_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CompanyOverviewListResponse(BaseModel):
    """Paginated list of company overviews."""

    total: int = Field(..., description="Total number of records")
    page: int = Field(..., description="Current page number")
    page_size: int = Field(..., description="Items per page")
    total_pages: int = Field(..., description="Total number of pages")
    items: List[CompanyOverviewListItem] = Field(..., description="Records in current page")
