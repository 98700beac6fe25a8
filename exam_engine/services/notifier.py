# exam_engine/services/notifier.py
"""
Broadcast of exam state transitions.

Delivery is fire-and-forget: the event goes onto the notification queue and a
worker picks it up. A broken queue must never undo a transition that has
already been committed, so failures are logged and swallowed here.
"""

import logging
from datetime import datetime

from redis.exceptions import RedisError

from exam_engine.workers.queue import enqueue_exam_ended_notification

logger = logging.getLogger(__name__)


def publish_exam_ended(exam_id: int, ended_at: datetime) -> str | None:
    try:
        job_id = enqueue_exam_ended_notification(exam_id, ended_at.isoformat())
    except RedisError as e:
        logger.warning(f"Could not publish exam-ended event for exam {exam_id}: {e}")
        return None

    logger.info(f"Published exam-ended event for exam {exam_id} (job {job_id})")
    return job_id
