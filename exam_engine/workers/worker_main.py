# exam_engine/workers/worker_main.py

from rq import Queue, SimpleWorker

from exam_engine.core.config import settings
from exam_engine.core.logging_config import configure_logging
from exam_engine.workers.queue import SWEEP_QUEUE_NAME, get_redis_connection


QUEUE_NAMES = [settings.NOTIFICATION_QUEUE_NAME, SWEEP_QUEUE_NAME]


def main():
    configure_logging()
    redis_conn = get_redis_connection()

    queues = [Queue(name, connection=redis_conn) for name in QUEUE_NAMES]

    worker = SimpleWorker(queues, connection=redis_conn)

    worker.work()


if __name__ == "__main__":
    main()
