"""
Live progress of background imports, as published by the worker to Redis.
"""

import json
import logging
from typing import Any, Dict, Optional

import redis

from api.config import settings
from backend.models.import_job import progress_key

logger = logging.getLogger(__name__)

redis_client = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)


def read_progress(job_id: str) -> Optional[Dict[str, Any]]:
    """Latest progress payload of a job, or None when Redis has none."""
    try:
        payload = redis_client.get(progress_key(job_id))
    except redis.RedisError as e:
        logger.warning(f"Could not read progress of job {job_id} from Redis: {e}")
        return None
    return json.loads(payload) if payload else None
