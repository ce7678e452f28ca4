"""
Celery tasks for recording analytics hits asynchronously.
"""

import redis
import redis.exceptions
import structlog

from celery_app import celery_app
from services.config import AppConfig
from services.analytics.recorder import STEPS, record_request

logger = structlog.get_logger(__name__)

def get_redis_client():
    """Helper to get Redis client connection."""
    redis_url = AppConfig.REDIS_URL
    if not redis_url:
        logger.error("REDIS_URL not found in AppConfig for analytics task.")
        return None
    try:
        client = redis.from_url(redis_url, decode_responses=True)
        client.ping()
        return client
    except redis.exceptions.RedisError as e:
        logger.error("Failed to connect to Redis in analytics task", error=str(e), exc_info=True)
        return None

@celery_app.task(bind=True, ignore_result=True)
def record_request_task(self, snapshot: dict) -> dict:
    """Celery task applying one request snapshot to the analytics store.

    Never retries. Store failures are logged and reported in the return value only.
    """
    task_logger = logger.bind(task_id=self.request.id, timezone=snapshot.get('timezone'))
    redis_client = get_redis_client()

    if not redis_client:
        task_logger.error("Cannot record analytics hit: Redis client unavailable. Dropping hit.")
        return {"status": "skipped", "applied_steps": 0}

    applied = record_request(redis_client, snapshot)
    status = "success" if applied == len(STEPS) else "partial"
    task_logger.info("Analytics hit processed", status=status, applied_steps=applied)
    return {"status": status, "applied_steps": applied}
