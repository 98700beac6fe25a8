# exam_engine/api/v1/endpoints/questions.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from exam_engine.core.security import get_current_author
from exam_engine.db.session import get_db
from exam_engine.models.user import User
from exam_engine.schemas.exam import ExamDetail
from exam_engine.schemas.question import QuestionCreate
from exam_engine.services import question_service

router = APIRouter(prefix="/exams/{exam_id}/questions", tags=["questions"])


@router.post("/", response_model=ExamDetail, status_code=status.HTTP_201_CREATED)
def add_question(
    exam_id: int,
    obj_in: QuestionCreate,
    db: Session = Depends(get_db),
    current_author: User = Depends(get_current_author),
):
    """
    老师向草稿考试添加题目。
    """
    return question_service.add_question(
        db, exam_id=exam_id, author=current_author, obj_in=obj_in
    )


@router.delete("/{question_number}", response_model=ExamDetail)
def remove_question(
    exam_id: int,
    question_number: int,
    db: Session = Depends(get_db),
    current_author: User = Depends(get_current_author),
):
    """
    删除题目，其余题目重新编号。
    """
    return question_service.remove_question(
        db, exam_id=exam_id, author=current_author, question_number=question_number
    )
