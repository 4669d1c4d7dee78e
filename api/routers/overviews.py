"""
Company overviews router - Read-only access to imported buyer profiles.

Backs the portal view pages, which render stored company overview data.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from api.dependencies import get_db
from api.schemas.overview_schema import (
    CompanyOverviewDetail, CompanyOverviewListItem, CompanyOverviewListResponse
)
from backend.models.schema import BuyersCompanyOverview

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/company-overviews', tags=['company-overviews'])


@router.get('', response_model=CompanyOverviewListResponse)
async def list_company_overviews(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search by registered name"),
    import_job_id: Optional[str] = Query(None, description="Only records from this import job"),
    db: Session = Depends(get_db)
):
    """
    List imported company overviews with pagination, newest first.

    **Example:**
    ```bash
    curl "http://localhost:8000/api/company-overviews?page=1&search=acme"
    ```
    """
    query = db.query(BuyersCompanyOverview)

    if search:
        query = query.filter(BuyersCompanyOverview.reg_name.ilike(f"%{search}%"))

    if import_job_id:
        query = query.filter_by(import_job_id=import_job_id)

    total = query.count()

    records = query.order_by(BuyersCompanyOverview.created_at.desc(), BuyersCompanyOverview.id.desc())\
        .offset((page - 1) * page_size)\
        .limit(page_size)\
        .all()

    total_pages = (total + page_size - 1) // page_size

    return CompanyOverviewListResponse(
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        items=[CompanyOverviewListItem.model_validate(r) for r in records]
    )


@router.get('/{overview_id}', response_model=CompanyOverviewDetail)
async def get_company_overview(
    overview_id: int,
    db: Session = Depends(get_db)
):
    """Get one company overview with every stored field."""
    record = db.get(BuyersCompanyOverview, overview_id)

    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Company overview {overview_id} not found"
        )

    return CompanyOverviewDetail.model_validate(record)
