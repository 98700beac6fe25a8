# exam_engine/services/grading_service.py
"""
Scoring at submit time and manual regrading afterwards.

Objective questions are marked immediately. Subjective ones are stored with
zero points and ``is_correct = None`` until a lecturer grades them.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from exam_engine.core import clock
from exam_engine.core.errors import NotFound, StateConflict, ValidationError
from exam_engine.models.exam import Exam, ExamStatus
from exam_engine.models.question import Question
from exam_engine.models.submission import Answer, Submission
from exam_engine.models.user import User
from exam_engine.schemas.submission import AnswerIn
from exam_engine.services import submission_service
from exam_engine.services.exam_service import get_exam_or_404, get_owned_exam

logger = logging.getLogger(__name__)


def normalize_response(value: Optional[str]) -> str:
    return (value or "").strip().casefold()


def score_response(question: Question, response: str) -> tuple[Optional[bool], int]:
    """
    Returns (is_correct, points_awarded) for one answer.
    """
    if not question.is_objective:
        return None, 0

    is_correct = normalize_response(response) == normalize_response(question.correct_answer)
    return is_correct, question.points if is_correct else 0


def percentage(score: int, total_points: int) -> float:
    if not total_points:
        return 0.0
    return round(score / total_points * 100, 2)


def time_taken_minutes(exam: Exam, submission: Submission) -> Optional[float]:
    if exam.started_at is None or submission.submitted_at is None:
        return None
    delta = clock.ensure_utc(submission.submitted_at) - clock.ensure_utc(exam.started_at)
    return round(delta.total_seconds() / 60, 1)


def _check_answer_numbers(answers: Iterable[AnswerIn], questions: dict[int, Question]) -> None:
    seen: set[int] = set()
    for item in answers:
        if item.question_number not in questions:
            raise ValidationError(f"Question {item.question_number} does not exist")
        if item.question_number in seen:
            raise ValidationError(f"Question {item.question_number} answered more than once")
        seen.add(item.question_number)


def submit(
    db: Session,
    *,
    exam_id: int,
    participant: User,
    answers: list[AnswerIn],
) -> Submission:
    """
    学生提交答卷并立即评分客观题。

    Checked in order: the exam exists, it is active and before its deadline,
    and this participant has not submitted yet. The status and the deadline
    are checked separately because the sweeper may not have closed an expired
    exam yet; the deadline wins.
    """
    exam = get_exam_or_404(db, exam_id)

    now = clock.utcnow()
    if exam.status != ExamStatus.ACTIVE.value:
        raise StateConflict(f"Exam is not accepting submissions (status: {exam.status})")
    if not exam.is_open_at(now):
        raise StateConflict("Exam deadline has passed")

    if submission_service.has_submitted(db, exam_id=exam.id, participant_id=participant.id):
        raise StateConflict("You have already submitted this exam")

    questions = {q.question_number: q for q in exam.questions}
    _check_answer_numbers(answers, questions)

    submission = Submission(
        exam_id=exam.id,
        participant_id=participant.id,
        submitted_at=now,
    )
    total = 0
    has_subjective = False
    for item in sorted(answers, key=lambda a: a.question_number):
        question = questions[item.question_number]
        is_correct, points = score_response(question, item.answer)
        if not question.is_objective:
            has_subjective = True
        total += points
        submission.answers.append(
            Answer(
                question_number=item.question_number,
                response=item.answer,
                is_correct=is_correct,
                points_awarded=points,
            )
        )

    submission.total_score = total
    submission.auto_graded = not has_subjective

    db.add(submission)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent submission from the same participant won the insert
        db.rollback()
        raise StateConflict("You have already submitted this exam")

    db.refresh(submission)
    logger.info(
        f"Participant {participant.id} submitted exam {exam_id}: "
        f"score={submission.total_score}, auto_graded={submission.auto_graded}"
    )
    return submission


def grade_answer(
    db: Session,
    *,
    exam_id: int,
    author: User,
    participant_id: int,
    question_number: int,
    points_awarded: int,
) -> Submission:
    """
    Manual grading of one answer, allowed in any exam state.

    Any points above zero mark the answer correct. The total is then summed
    again from every stored answer.
    """
    exam = get_owned_exam(db, exam_id, author=author)

    submission = submission_service.get_submission_or_404(
        db, exam_id=exam.id, participant_id=participant_id, for_update=True
    )
    answer = (
        db.query(Answer)
        .filter(
            Answer.submission_id == submission.id,
            Answer.question_number == question_number,
        )
        .first()
    )
    if answer is None:
        raise NotFound(f"Question {question_number} was not answered in this submission")

    question = (
        db.query(Question)
        .filter(Question.exam_id == exam.id, Question.question_number == question_number)
        .first()
    )
    if question is None:
        raise NotFound(f"Question {question_number} not found in exam {exam.id}")

    if points_awarded is None or not 0 <= points_awarded <= question.points:
        raise ValidationError(f"Points must be between 0 and {question.points}")

    answer.points_awarded = points_awarded
    answer.is_correct = points_awarded > 0
    submission_service.recompute_total_score(db, submission)
    submission.graded_at = clock.utcnow()

    db.commit()
    db.refresh(submission)
    logger.info(
        f"Graded exam {exam.id} participant {participant_id} question {question_number}: "
        f"{points_awarded}/{question.points}, total={submission.total_score}"
    )
    return submission
