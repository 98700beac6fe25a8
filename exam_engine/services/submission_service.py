# exam_engine/services/submission_service.py
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from exam_engine.core.errors import NotFound
from exam_engine.models.submission import Answer, Submission
from exam_engine.models.user import User
from exam_engine.services.exam_service import get_owned_exam


def get_submission(
    db: Session,
    *,
    exam_id: int,
    participant_id: int,
    for_update: bool = False,
) -> Optional[Submission]:
    query = db.query(Submission).filter(
        Submission.exam_id == exam_id,
        Submission.participant_id == participant_id,
    )
    if for_update:
        query = query.with_for_update()
    return query.first()


def get_submission_or_404(
    db: Session,
    *,
    exam_id: int,
    participant_id: int,
    for_update: bool = False,
) -> Submission:
    submission = get_submission(
        db, exam_id=exam_id, participant_id=participant_id, for_update=for_update
    )
    if submission is None:
        raise NotFound(
            f"No submission from participant {participant_id} for exam {exam_id}"
        )
    return submission


def has_submitted(db: Session, *, exam_id: int, participant_id: int) -> bool:
    return (
        db.query(Submission.id)
        .filter(
            Submission.exam_id == exam_id,
            Submission.participant_id == participant_id,
        )
        .first()
        is not None
    )


def recompute_total_score(db: Session, submission: Submission) -> int:
    """
    Full resummation of the stored answers; never an incremental delta, so a
    retried grade call lands on the same total.
    """
    db.flush()
    total = (
        db.query(func.coalesce(func.sum(Answer.points_awarded), 0))
        .filter(Answer.submission_id == submission.id)
        .scalar()
    )
    submission.total_score = int(total)
    return submission.total_score


def list_submissions_for_exam(
    db: Session,
    *,
    exam_id: int,
    skip: int = 0,
    limit: int = 100,
) -> List[Submission]:
    return (
        db.query(Submission)
        .filter(Submission.exam_id == exam_id)
        .order_by(Submission.submitted_at.asc(), Submission.id.asc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_results(
    db: Session,
    *,
    exam_id: int,
    author: User,
    skip: int = 0,
    limit: int = 100,
) -> List[Submission]:
    """
    lecturer: every submission for one of their exams
    """
    exam = get_owned_exam(db, exam_id, author=author)
    return list_submissions_for_exam(db, exam_id=exam.id, skip=skip, limit=limit)
