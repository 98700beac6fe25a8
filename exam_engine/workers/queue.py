# exam_engine/workers/queue.py

from typing import Any, Callable, Optional

from redis import Redis
from rq import Queue

from exam_engine.core.config import settings

SWEEP_QUEUE_NAME = "sweeps"

_redis_conn: Redis | None = None


def get_redis_connection() -> Redis:
    global _redis_conn
    if _redis_conn is None:
        _redis_conn = Redis.from_url(settings.REDIS_URL)
    return _redis_conn


def get_queue(name: Optional[str] = None) -> Queue:
    """
    Queues the worker in worker_main listens on. Without a name the
    notification queue is used.
    """
    return Queue(name or settings.NOTIFICATION_QUEUE_NAME, connection=get_redis_connection())


def enqueue_job(
    func: Callable[..., Any],
    *args: Any,
    queue_name: Optional[str] = None,
    **kwargs: Any,
) -> str:
    job = get_queue(queue_name).enqueue(func, *args, **kwargs)
    return job.id


def enqueue_exam_ended_notification(exam_id: int, ended_at: str) -> str:
    from exam_engine.workers.tasks import notify_exam_ended_task

    # ended_at travels as ISO text so the job payload stays JSON-friendly
    return enqueue_job(notify_exam_ended_task, exam_id, ended_at)


def enqueue_sweep_task() -> str:
    from exam_engine.workers.tasks import sweep_expired_exams_task

    return enqueue_job(sweep_expired_exams_task, queue_name=SWEEP_QUEUE_NAME)
