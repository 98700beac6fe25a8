# exam_engine/api/v1/endpoints/submissions.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from exam_engine.core.security import get_current_participant
from exam_engine.db.session import get_db
from exam_engine.models.exam import Exam
from exam_engine.models.submission import Submission
from exam_engine.models.user import User
from exam_engine.schemas.submission import (
    AnswerPublic,
    ScoreSummary,
    SubmissionCreate,
    SubmissionPublic,
)
from exam_engine.services import exam_service, grading_service, submission_service

router = APIRouter(prefix="/exams/{exam_id}/submissions", tags=["submissions"])


def _submission_to_score_summary(exam: Exam, sub: Submission) -> ScoreSummary:
    pct = grading_service.percentage(sub.total_score, exam.total_points)
    return ScoreSummary(
        submission_id=sub.id,
        exam_id=exam.id,
        participant_id=sub.participant_id,
        total_score=sub.total_score,
        total_points=exam.total_points,
        percentage=pct,
        passed=pct >= exam.passing_score,
        auto_graded=sub.auto_graded,
        time_taken_minutes=grading_service.time_taken_minutes(exam, sub),
        answers=[AnswerPublic.model_validate(a) for a in sub.answers],
    )


@router.post("/", response_model=ScoreSummary, status_code=status.HTTP_201_CREATED)
def submit_exam(
    exam_id: int,
    obj_in: SubmissionCreate,
    db: Session = Depends(get_db),
    current_participant: User = Depends(get_current_participant),
):
    """
    学生提交答卷；客观题立即评分，主观题等待老师评分。
    """
    sub = grading_service.submit(
        db, exam_id=exam_id, participant=current_participant, answers=obj_in.answers
    )
    exam = exam_service.get_exam_or_404(db, exam_id)
    return _submission_to_score_summary(exam, sub)


@router.get("/me", response_model=SubmissionPublic)
def get_my_submission(
    exam_id: int,
    db: Session = Depends(get_db),
    current_participant: User = Depends(get_current_participant),
):
    return submission_service.get_submission_or_404(
        db, exam_id=exam_id, participant_id=current_participant.id
    )
