"""
WebSocket feed of background import progress.
"""

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends, status
from sqlalchemy.orm import Session

from api.dependencies import get_db
from api.progress import read_progress
from api.schemas.import_job_schema import ImportJobResponse
from backend.models.import_job import ImportJob

logger = logging.getLogger(__name__)

router = APIRouter(tags=['websocket'])

POLL_INTERVAL = 0.5


@router.websocket('/ws/import/{job_id}')
async def import_progress_feed(websocket: WebSocket, job_id: str, db: Session = Depends(get_db)):
    """
    Follow a background import until it finishes.

    The first message carries the job's status. Each new Redis progress
    payload is sent as ``{"job_id", "status", "progress"}``. The last
    message is the job itself, as ``GET /api/import/job/{job_id}`` returns
    it, with ``"finished": true``; the socket is then closed.
    """
    await websocket.accept()

    job = db.query(ImportJob).filter_by(job_id=job_id).first()
    if job is None:
        await websocket.send_json({'job_id': job_id, 'error': f'Import job {job_id} not found'})
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    try:
        await websocket.send_json({'job_id': job_id, 'status': job.status})

        last_progress = None
        while not job.is_finished():
            progress = read_progress(job_id)
            if progress and progress != last_progress:
                await websocket.send_json({'job_id': job_id, 'status': job.status, 'progress': progress})
                last_progress = progress
            await asyncio.sleep(POLL_INTERVAL)
            db.refresh(job)

        final = ImportJobResponse.model_validate(job).model_dump(mode='json')
        final['finished'] = True
        await websocket.send_json(final)
        await websocket.close()
        logger.info(f"Import job {job_id} {job.status}; progress feed closed")

    except WebSocketDisconnect:
        logger.info(f"Progress feed client for job {job_id} went away")
