"""
Import router - company overview workbook uploads.

``POST /import/buyers-company-overview`` imports while the caller waits;
``POST /import/upload`` hands the workbook to the Celery worker and the
``/import/job`` endpoints follow it.
"""

import os
import logging
import tempfile
import shutil
import uuid
from pathlib import Path
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, UploadFile, File, Depends, HTTPException, status, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from api.config import settings
from api.dependencies import get_db, get_current_user, verify_file_extension, verify_file_size
from api.progress import read_progress
from api.schemas.import_schema import ImportResultResponse, ImportStartResponse
from api.schemas.import_job_schema import (
    ImportStatusEnum, ImportProgressResponse, ImportJobResponse,
    ImportJobListItem, ImportJobListResponse
)
from backend.models.import_job import ImportJob, ImportStatus
from services.company_overview_import_service import CompanyOverviewImportService
from tasks.celery_app import celery_app
from tasks.import_tasks import import_company_overviews

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/import', tags=['import'])


def save_upload(file: UploadFile) -> str:
    """
    Copy an upload into TEMP_UPLOAD_DIR after checking extension and size.

    Returns:
        Path of the temporary file (caller removes it)
    """
    verify_file_extension(file.filename)

    fd, temp_path = tempfile.mkstemp(
        suffix=Path(file.filename).suffix,
        dir=settings.TEMP_UPLOAD_DIR
    )
    try:
        with os.fdopen(fd, 'wb') as tmp:
            shutil.copyfileobj(file.file, tmp)
        verify_file_size(os.path.getsize(temp_path))
    except Exception:
        os.unlink(temp_path)
        raise

    return temp_path


@router.post('/buyers-company-overview', response_model=ImportResultResponse,
             responses={422: {'model': ImportResultResponse}})
def import_buyers_company_overview(
    excel_file: UploadFile = File(..., description="Company overview workbook (.xlsx or .xlsm)"),
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user)
):
    """
    Import buyer company overviews synchronously.

    Valid rows are inserted in batches of 500. Rows without a registered
    company name are skipped; rows failing validation are rejected and
    reported per column.

    **Returns:**
    - 200 when every row was imported or skipped
    - 422 with per-row errors when any row failed validation
    - 400 for unsupported file types
    """
    logger.info(f"Synchronous import request from {current_user}: {excel_file.filename}")

    temp_path = save_upload(excel_file)
    try:
        service = CompanyOverviewImportService(
            db_session=db,
            batch_size=settings.IMPORT_BATCH_SIZE,
            chunk_size=settings.IMPORT_CHUNK_SIZE
        )
        summary = service.import_file(temp_path)

    except HTTPException:
        raise

    except Exception as e:
        logger.error(f"Import General Error via API: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                'message': 'An unexpected error occurred during import.',
                'error_details': str(e)
            }
        )

    finally:
        if os.path.exists(temp_path):
            os.unlink(temp_path)

    if summary['errors']:
        logger.error(f"Import Validation Errors via API: {summary['errors']}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ImportResultResponse(
                message='There were validation issues with the Excel file.',
                errors=summary['errors'],
                summary=summary
            ).model_dump()
        )

    return ImportResultResponse(
        message='Company overview data imported successfully!',
        summary=summary
    )


@router.post('/upload', response_model=ImportStartResponse, status_code=status.HTTP_202_ACCEPTED)
async def upload_company_overview_file(
    file: UploadFile = File(..., description="Company overview workbook (.xlsx or .xlsm)"),
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user)
):
    """
    Queue a workbook for the import worker and return its job id.

    Follow the job at GET /api/import/job/{job_id} or over
    WS /ws/import/{job_id}. The worker deletes the upload when it is done.
    """
    temp_path = save_upload(file)
    file_size = os.path.getsize(temp_path)
    job_id = str(uuid.uuid4())
    logger.info(f"Queueing {file.filename} ({file_size} bytes) as job {job_id} for {current_user}")

    # Stored before queueing so the worker always finds its job record
    job = ImportJob(
        job_id=job_id,
        filename=file.filename,
        file_size_bytes=file_size,
        status=ImportStatus.QUEUED.value,
        requested_by=current_user
    )
    db.add(job)
    db.commit()

    try:
        import_company_overviews.apply_async(args=[temp_path], task_id=job_id)
    except Exception as e:
        os.unlink(temp_path)
        job.status = ImportStatus.FAILED.value
        job.finished_at = datetime.utcnow()
        job.error_message = f"Could not queue import: {e}"
        db.commit()
        logger.error(f"Could not queue import of {file.filename}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Import worker unavailable: {e}"
        )

    return ImportStartResponse(
        job_id=job_id,
        status_url=f"/api/import/job/{job_id}",
        websocket_url=f"/ws/import/{job_id}"
    )


def find_job(db: Session, job_id: str) -> ImportJob:
    job = db.query(ImportJob).filter_by(job_id=job_id).first()
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Import job {job_id} not found"
        )
    return job


@router.get('/job/{job_id}', response_model=ImportJobResponse)
async def get_import_job(job_id: str, db: Session = Depends(get_db)):
    """
    Status and row counts of a background import.

    ``latest_progress`` comes from Redis while the worker runs and from the
    last stored stage afterwards.
    """
    job = find_job(db, job_id)
    response = ImportJobResponse.model_validate(job)

    live = read_progress(job_id)
    if live:
        response.latest_progress = ImportProgressResponse(**live)

    return response


@router.get('/jobs', response_model=ImportJobListResponse)
async def list_import_jobs(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    status: Optional[ImportStatusEnum] = Query(None, description="Only jobs in this status"),
    db: Session = Depends(get_db)
):
    """Background imports, newest first."""
    query = db.query(ImportJob)
    if status:
        query = query.filter(ImportJob.status == status.value)

    total = query.count()
    jobs = query.order_by(ImportJob.created_at.desc())\
        .offset((page - 1) * page_size)\
        .limit(page_size)\
        .all()

    return ImportJobListResponse(
        total=total,
        page=page,
        page_size=page_size,
        total_pages=(total + page_size - 1) // page_size,
        items=[ImportJobListItem.model_validate(job) for job in jobs]
    )


@router.delete('/job/{job_id}', status_code=status.HTTP_204_NO_CONTENT)
async def cancel_import_job(
    job_id: str,
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user)
):
    """
    Cancel a queued or running import.

    Batches already committed stay in the database. Returns 400 when the
    job has finished.
    """
    job = find_job(db, job_id)
    if job.is_finished():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Import job {job_id} already {job.status}"
        )

    job.status = ImportStatus.CANCELLED.value
    job.finished_at = datetime.utcnow()
    job.error_message = f"Cancelled by {current_user}"
    db.commit()

    try:
        celery_app.control.revoke(job_id, terminate=True)
    except Exception as e:
        logger.warning(f"Could not revoke task {job_id}: {e}")

    logger.info(f"Import job {job_id} cancelled by {current_user}")
    return None
