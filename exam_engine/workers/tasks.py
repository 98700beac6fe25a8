"""
Exam Tasks for Worker
These tasks are executed by RQ workers off the request path
"""

import logging

from exam_engine.db.session import SessionLocal
from exam_engine.models.exam import Exam
from exam_engine.models.submission import Submission
from exam_engine.services.exam_service import sweep_expired_exams

logger = logging.getLogger(__name__)


def notify_exam_ended_task(exam_id: int, ended_at: str) -> dict:
    """
    Worker task announcing that an exam has closed and results are ready.

    Builds the results-ready event (exam, author, how many submissions are
    still waiting for manual grading) and hands it to the log, which is where
    the portal's notification consumer picks it up.

    Args:
        exam_id: ID of the exam that just ended
        ended_at: ISO timestamp of the transition

    Returns:
        Dictionary describing the event
    """
    db = SessionLocal()
    try:
        exam = db.query(Exam).filter(Exam.id == exam_id).first()
        if exam is None:
            logger.warning(f"Exam {exam_id} vanished before its ended event was sent")
            return {"status": "error", "exam_id": exam_id, "message": "Exam not found"}

        submissions = db.query(Submission).filter(Submission.exam_id == exam_id).all()
        awaiting_grading = sum(1 for s in submissions if not s.auto_graded and s.graded_at is None)

        event = {
            "status": "success",
            "type": "exam-ended",
            "exam_id": exam.id,
            "title": exam.title,
            "author_id": exam.author_id,
            "ended_at": ended_at,
            "submission_count": len(submissions),
            "awaiting_grading": awaiting_grading,
        }
        logger.info(
            f"Results ready for exam {exam.id} ({exam.title}): "
            f"{len(submissions)} submission(s), {awaiting_grading} awaiting grading"
        )
        return event

    except Exception as e:
        logger.error(
            f"Unexpected error while notifying end of exam {exam_id}: {e}",
            exc_info=True,
        )
        return {"status": "error", "exam_id": exam_id, "error": str(e)}

    finally:
        db.close()


def sweep_expired_exams_task() -> dict:
    """
    Worker task running one expiry-sweeper tick.
    Lets an external scheduler drive the sweep through the queue instead of
    the in-process sweeper thread.
    """
    db = SessionLocal()
    try:
        ended = sweep_expired_exams(db)
        return {"status": "success", "ended_exam_ids": ended}

    except Exception as e:
        logger.error(f"Expiry sweep task failed: {e}", exc_info=True)
        return {"status": "error", "error": str(e)}

    finally:
        db.close()
