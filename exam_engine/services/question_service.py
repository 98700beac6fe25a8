# exam_engine/services/question_service.py
import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from exam_engine.core.errors import NotFound, StateConflict, ValidationError
from exam_engine.models.exam import Exam, ExamStatus
from exam_engine.models.question import Question, QuestionKind
from exam_engine.models.user import User
from exam_engine.schemas.question import QuestionCreate
from exam_engine.services.exam_service import get_owned_exam

logger = logging.getLogger(__name__)


def _require_draft(exam: Exam) -> None:
    if exam.status != ExamStatus.DRAFT.value:
        raise StateConflict(
            f"Questions can only be changed while the exam is draft (exam is {exam.status})"
        )


def _validate_question(obj_in: QuestionCreate) -> None:
    if not obj_in.prompt or not obj_in.prompt.strip():
        raise ValidationError("Question prompt is required")
    if obj_in.points is None or obj_in.points < 1:
        raise ValidationError("Question points must be at least 1")

    if obj_in.kind == QuestionKind.SUBJECTIVE:
        if obj_in.options:
            raise ValidationError("Subjective questions cannot have options")
        if obj_in.correct_answer:
            raise ValidationError("Subjective questions have no answer key; use reference_answer")
        return

    options = obj_in.options or []
    labels = [opt.label.strip() for opt in options]
    if len(labels) < 2:
        raise ValidationError("Objective questions need at least two options")
    if any(not label for label in labels):
        raise ValidationError("Every option needs a label")
    if len(set(labels)) != len(labels):
        raise ValidationError("Option labels must be unique")
    if not obj_in.correct_answer or obj_in.correct_answer.strip() not in labels:
        raise ValidationError("Correct answer must be one of the option labels")


def _recompute_total_points(db: Session, exam: Exam) -> int:
    db.flush()
    total = (
        db.query(func.coalesce(func.sum(Question.points), 0))
        .filter(Question.exam_id == exam.id)
        .scalar()
    )
    exam.total_points = int(total)
    return exam.total_points


def list_questions(db: Session, exam_id: int) -> List[Question]:
    return (
        db.query(Question)
        .filter(Question.exam_id == exam_id)
        .order_by(Question.question_number.asc())
        .all()
    )


def add_question(
    db: Session,
    *,
    exam_id: int,
    author: User,
    obj_in: QuestionCreate,
) -> Exam:
    """
    lecturer appends a question to a draft exam
    """
    exam = get_owned_exam(db, exam_id, author=author, for_update=True)
    _require_draft(exam)
    _validate_question(obj_in)

    count = db.query(func.count(Question.id)).filter(Question.exam_id == exam.id).scalar()

    number = count + 1
    is_objective = obj_in.kind == QuestionKind.OBJECTIVE
    question = Question(
        exam_id=exam.id,
        question_number=number,
        kind=obj_in.kind.value,
        prompt=obj_in.prompt.strip(),
        points=obj_in.points,
        options=(
            [{"label": o.label.strip(), "text": o.text} for o in obj_in.options]
            if is_objective
            else None
        ),
        correct_answer=obj_in.correct_answer.strip() if is_objective else None,
        reference_answer=None if is_objective else obj_in.reference_answer,
    )
    db.add(question)
    _recompute_total_points(db, exam)

    db.commit()
    db.refresh(exam)
    logger.info(f"Question {number} added to exam {exam.id}")
    return exam


def remove_question(
    db: Session,
    *,
    exam_id: int,
    author: User,
    question_number: int,
) -> Exam:
    """
    lecturer removes a question; the rest are renumbered 1..N keeping their order
    """
    exam = get_owned_exam(db, exam_id, author=author, for_update=True)
    _require_draft(exam)

    question = (
        db.query(Question)
        .filter(Question.exam_id == exam.id, Question.question_number == question_number)
        .first()
    )
    if question is None:
        raise NotFound(f"Question {question_number} not found in exam {exam.id}")

    db.delete(question)
    db.flush()

    for number, remaining in enumerate(list_questions(db, exam.id), start=1):
        remaining.question_number = number

    _recompute_total_points(db, exam)

    db.commit()
    db.refresh(exam)
    logger.info(f"Question {question_number} removed from exam {exam.id}")
    return exam
