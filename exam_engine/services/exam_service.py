# exam_engine/services/exam_service.py
"""
Exam lifecycle: draft -> active -> ended.

State changes go through conditional UPDATEs guarded on the current status,
so two callers racing on the same exam (a lecturer pressing "end" while the
expiry sweeper fires, or two instances of either) produce exactly one
effective transition.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from exam_engine.core import clock
from exam_engine.core.errors import (
    AuthorizationError,
    NotFound,
    StateConflict,
    ValidationError,
)
from exam_engine.models.exam import Exam, ExamStatus
from exam_engine.models.question import Question
from exam_engine.models.submission import Submission
from exam_engine.models.user import User
from exam_engine.schemas.exam import ExamCreate, ExamUpdate
from exam_engine.services import notifier

logger = logging.getLogger(__name__)


def create_exam(
    db: Session,
    *,
    author: User,
    obj_in: ExamCreate,
) -> Exam:
    """
    lecturer creates an empty draft exam
    """
    title = (obj_in.title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if obj_in.duration_minutes is None or obj_in.duration_minutes <= 0:
        raise ValidationError("Duration must be a positive number of minutes")

    db_obj = Exam(
        author_id=author.id,
        title=title,
        description=obj_in.description,
        duration_minutes=obj_in.duration_minutes,
        passing_score=obj_in.passing_score,
        total_points=0,
        status=ExamStatus.DRAFT.value,
    )
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    logger.info(f"Exam {db_obj.id} created by user {author.id}")
    return db_obj


def get_exam(db: Session, exam_id: int, *, for_update: bool = False) -> Optional[Exam]:
    query = db.query(Exam).filter(Exam.id == exam_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def get_exam_or_404(db: Session, exam_id: int, *, for_update: bool = False) -> Exam:
    exam = get_exam(db, exam_id, for_update=for_update)
    if exam is None:
        raise NotFound(f"Exam {exam_id} not found")
    return exam


def ensure_owner(exam: Exam, user: User) -> None:
    if exam.author_id != user.id and not user.is_admin:
        raise AuthorizationError("Not authorized to manage this exam")


def get_owned_exam(
    db: Session,
    exam_id: int,
    *,
    author: User,
    for_update: bool = False,
) -> Exam:
    exam = get_exam_or_404(db, exam_id, for_update=for_update)
    ensure_owner(exam, author)
    return exam


def list_exams_for_author(
    db: Session,
    *,
    author: User,
    skip: int = 0,
    limit: int = 100,
) -> List[Exam]:
    return (
        db.query(Exam)
        .filter(Exam.author_id == author.id)
        .order_by(Exam.created_at.desc(), Exam.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def list_available_exams(
    db: Session,
    *,
    participant: User,
    skip: int = 0,
    limit: int = 100,
) -> List[tuple[Exam, bool]]:
    """
    student: exams still open for submission, each paired with whether they
    already submitted. The deadline decides, even before the sweeper has
    flipped the status.
    """
    now = clock.utcnow()
    exams = (
        db.query(Exam)
        .filter(Exam.status == ExamStatus.ACTIVE.value, Exam.deadline > now)
        .order_by(Exam.deadline.asc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    if not exams:
        return []

    submitted_ids = {
        row.exam_id
        for row in db.query(Submission.exam_id).filter(
            Submission.participant_id == participant.id,
            Submission.exam_id.in_([e.id for e in exams]),
        )
    }
    return [(exam, exam.id in submitted_ids) for exam in exams]


def update_exam(
    db: Session,
    *,
    exam_id: int,
    author: User,
    obj_in: ExamUpdate,
) -> Exam:
    """
    Edit title, description, duration or passing score of a draft exam.
    Once started the deadline is fixed, so everything is frozen.
    """
    exam = get_owned_exam(db, exam_id, author=author, for_update=True)
    if exam.status != ExamStatus.DRAFT.value:
        raise StateConflict(f"Only draft exams can be edited (exam is {exam.status})")

    changes = obj_in.model_dump(exclude_unset=True)
    if "title" in changes:
        title = (changes["title"] or "").strip()
        if not title:
            raise ValidationError("Title is required")
        changes["title"] = title
    if "duration_minutes" in changes and (
        changes["duration_minutes"] is None or changes["duration_minutes"] <= 0
    ):
        raise ValidationError("Duration must be a positive number of minutes")
    if "passing_score" in changes and changes["passing_score"] is None:
        raise ValidationError("Passing score is required")

    for field, value in changes.items():
        setattr(exam, field, value)

    db.commit()
    db.refresh(exam)
    logger.info(f"Exam {exam.id} updated by user {author.id}: {sorted(changes)}")
    return exam


def start_exam(db: Session, *, exam_id: int, author: User) -> Exam:
    exam = get_owned_exam(db, exam_id, author=author, for_update=True)

    if exam.status == ExamStatus.ACTIVE.value:
        raise StateConflict("Exam is already active")
    if exam.status == ExamStatus.ENDED.value:
        raise StateConflict("Exam has already ended")

    question_count = (
        db.query(func.count(Question.id)).filter(Question.exam_id == exam.id).scalar()
    )
    if not question_count:
        raise StateConflict("Cannot start an exam without questions")

    now = clock.utcnow()
    deadline = now + timedelta(minutes=exam.duration_minutes)
    result = db.execute(
        update(Exam)
        .where(Exam.id == exam.id, Exam.status == ExamStatus.DRAFT.value)
        .values(status=ExamStatus.ACTIVE.value, started_at=now, deadline=deadline)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise StateConflict("Exam is no longer in draft")

    db.commit()
    db.refresh(exam)
    logger.info(f"Exam {exam.id} started, deadline {deadline.isoformat()}")
    return exam


def transition_to_ended(db: Session, exam_id: int, *, now: datetime) -> bool:
    """
    Atomically move an exam from active to ended.

    Returns True only for the caller whose UPDATE actually changed the row;
    that caller alone broadcasts the exam-ended event. Everyone else sees a
    no-op (the exam was already ended, or never started).
    """
    result = db.execute(
        update(Exam)
        .where(Exam.id == exam_id, Exam.status == ExamStatus.ACTIVE.value)
        .values(status=ExamStatus.ENDED.value, ended_at=now)
        .execution_options(synchronize_session=False)
    )
    db.commit()

    if result.rowcount != 1:
        return False

    logger.info(f"Exam {exam_id} ended at {now.isoformat()}")
    notifier.publish_exam_ended(exam_id, now)
    return True


def end_exam(db: Session, *, exam_id: int, author: User) -> Exam:
    """
    Manual end. Ending an already-ended exam is a no-op success, since the
    sweeper may have closed it first.
    """
    exam = get_owned_exam(db, exam_id, author=author)

    if exam.status == ExamStatus.DRAFT.value:
        raise StateConflict("Exam has not been started")

    if exam.status == ExamStatus.ACTIVE.value:
        transition_to_ended(db, exam.id, now=clock.utcnow())

    db.refresh(exam)
    return exam


def delete_exam(db: Session, *, exam_id: int, author: User) -> None:
    """
    Drafts can always go. An ended exam can go only if nobody submitted,
    since deleting it would take the submissions and their grades with it.
    """
    exam = get_owned_exam(db, exam_id, author=author, for_update=True)
    if exam.status == ExamStatus.ACTIVE.value:
        raise StateConflict("Cannot delete an exam while it is active")
    if exam.status == ExamStatus.ENDED.value:
        submission_count = (
            db.query(func.count(Submission.id))
            .filter(Submission.exam_id == exam.id)
            .scalar()
        )
        if submission_count:
            raise StateConflict(
                f"Cannot delete an ended exam with {submission_count} submission(s)"
            )

    db.delete(exam)
    db.commit()
    logger.info(f"Exam {exam_id} deleted by user {author.id}")


def sweep_expired_exams(db: Session, *, now: datetime | None = None) -> List[int]:
    """
    One expiry-sweeper tick: end every active exam whose deadline has passed.

    A failure on one exam is logged and the sweep moves on; losing the
    database connection altogether aborts the tick.
    """
    now = now or clock.utcnow()

    # plain rows, so later commits cannot expire them under us
    active_rows = (
        db.query(Exam.id, Exam.started_at, Exam.duration_minutes)
        .filter(Exam.status == ExamStatus.ACTIVE.value)
        .all()
    )

    ended: List[int] = []
    for exam_id, started_at, duration_minutes in active_rows:
        try:
            if started_at is None:
                continue
            deadline = clock.ensure_utc(started_at) + timedelta(minutes=duration_minutes)
            if now < deadline:
                continue
            if transition_to_ended(db, exam_id, now=now):
                ended.append(exam_id)
        except OperationalError:
            raise
        except Exception:
            db.rollback()
            logger.exception(f"Expiry sweep failed for exam {exam_id}")

    if ended:
        logger.info(f"Expiry sweep ended {len(ended)} exam(s): {ended}")
    return ended
