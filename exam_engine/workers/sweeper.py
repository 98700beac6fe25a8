# exam_engine/workers/sweeper.py
"""
Expiry sweeper: closes active exams whose deadline has passed, whether or not
anyone calls "end".

Run it as its own process (``python -m exam_engine.workers.sweeper``) or let
the API start it as a daemon thread (``SWEEPER_ENABLED``). Several sweepers
may run at once; the conditional UPDATE in ``transition_to_ended`` keeps the
transition single.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from exam_engine.core.config import settings
from exam_engine.core.logging_config import configure_logging
from exam_engine.db.session import SessionLocal
from exam_engine.services.exam_service import sweep_expired_exams

logger = logging.getLogger(__name__)


class ExpirySweeper:
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        interval_seconds: Optional[float] = None,
    ):
        self.session_factory = session_factory
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None else settings.SWEEP_INTERVAL_SECONDS
        )
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run_once(self, now: Optional[datetime] = None) -> List[int]:
        db = self.session_factory()
        try:
            return sweep_expired_exams(db, now=now)
        finally:
            db.close()

    def run_forever(self) -> None:
        logger.info(f"Expiry sweeper started, checking every {self.interval_seconds}s")
        while not self._stop_event.is_set():
            try:
                self.run_once()
            except Exception:
                # includes losing the database; try again next tick
                logger.exception("Expiry sweep tick failed")
            self._stop_event.wait(self.interval_seconds)
        logger.info("Expiry sweeper stopped")

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_forever, name="expiry-sweeper", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()


def main():
    configure_logging()
    sweeper = ExpirySweeper()
    try:
        sweeper.run_forever()
    except KeyboardInterrupt:
        sweeper.stop()


if __name__ == "__main__":
    main()
