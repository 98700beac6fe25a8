# exam_engine/api/v1/endpoints/scores.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from exam_engine.core.security import get_current_author
from exam_engine.db.session import get_db
from exam_engine.models.user import User
from exam_engine.schemas.submission import GradeUpdate, SubmissionPublic
from exam_engine.services import grading_service, submission_service

router = APIRouter(prefix="/exams/{exam_id}", tags=["scores"])


@router.get("/results", response_model=List[SubmissionPublic])
def get_results(
    exam_id: int,
    db: Session = Depends(get_db),
    current_author: User = Depends(get_current_author),
    skip: int = 0,
    limit: int = 100,
):
    """
    老师查看某场考试的全部答卷。
    """
    return submission_service.get_results(
        db, exam_id=exam_id, author=current_author, skip=skip, limit=limit
    )


@router.put(
    "/submissions/{participant_id}/answers/{question_number}",
    response_model=SubmissionPublic,
)
def grade_answer(
    exam_id: int,
    participant_id: int,
    question_number: int,
    grade_in: GradeUpdate,
    db: Session = Depends(get_db),
    current_author: User = Depends(get_current_author),
):
    """
    老师人工评分（主观题），总分重新求和。
    """
    return grading_service.grade_answer(
        db,
        exam_id=exam_id,
        author=current_author,
        participant_id=participant_id,
        question_number=question_number,
        points_awarded=grade_in.points_awarded,
    )
