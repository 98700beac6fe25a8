# exam_engine/api/v1/endpoints/exams.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from exam_engine.core.errors import NotFound
from exam_engine.core.security import get_current_author, get_current_participant
from exam_engine.db.session import get_db
from exam_engine.models.exam import Exam, ExamStatus
from exam_engine.models.user import User
from exam_engine.schemas.exam import (
    AvailableExam,
    ExamCreate,
    ExamDetail,
    ExamSummary,
    ExamUpdate,
    ParticipantExamView,
)
from exam_engine.schemas.question import QuestionDetail
from exam_engine.services import exam_service, submission_service

router = APIRouter(prefix="/exams", tags=["exams"])


def _exam_to_participant_view(exam: Exam, *, has_submitted: bool) -> ParticipantExamView:
    revealed = exam.status == ExamStatus.ENDED.value
    questions = []
    for q in exam.questions:
        item = QuestionDetail.model_validate(q)
        if not revealed:
            item.correct_answer = None
            item.reference_answer = None
        questions.append(item)

    summary = ExamSummary.model_validate(exam)
    return ParticipantExamView(
        **summary.model_dump(),
        questions=questions,
        answers_revealed=revealed,
        has_submitted=has_submitted,
    )


@router.post("/", response_model=ExamDetail, status_code=status.HTTP_201_CREATED)
def create_exam(
    obj_in: ExamCreate,
    db: Session = Depends(get_db),
    current_author: User = Depends(get_current_author),
):
    """
    老师创建考试（draft）。
    """
    return exam_service.create_exam(db, author=current_author, obj_in=obj_in)


@router.get("/mine", response_model=List[ExamSummary])
def list_my_exams(
    db: Session = Depends(get_db),
    current_author: User = Depends(get_current_author),
    skip: int = 0,
    limit: int = 100,
):
    return exam_service.list_exams_for_author(
        db, author=current_author, skip=skip, limit=limit
    )


@router.get("/available", response_model=List[AvailableExam])
def list_available_exams(
    db: Session = Depends(get_db),
    current_participant: User = Depends(get_current_participant),
    skip: int = 0,
    limit: int = 100,
):
    """
    学生查看正在进行的考试。
    """
    pairs = exam_service.list_available_exams(
        db, participant=current_participant, skip=skip, limit=limit
    )
    return [
        AvailableExam(**ExamSummary.model_validate(exam).model_dump(), has_submitted=taken)
        for exam, taken in pairs
    ]


@router.get("/{exam_id}", response_model=ParticipantExamView)
def get_exam_for_participant(
    exam_id: int,
    db: Session = Depends(get_db),
    current_participant: User = Depends(get_current_participant),
):
    """
    学生查看考试；考试结束前不返回正确答案。
    """
    exam = exam_service.get_exam_or_404(db, exam_id)
    if exam.status == ExamStatus.DRAFT.value:
        # unpublished exams are invisible to participants
        raise NotFound(f"Exam {exam_id} not found")

    taken = submission_service.has_submitted(
        db, exam_id=exam.id, participant_id=current_participant.id
    )
    return _exam_to_participant_view(exam, has_submitted=taken)


@router.get("/{exam_id}/detail", response_model=ExamDetail)
def get_exam_detail(
    exam_id: int,
    db: Session = Depends(get_db),
    current_author: User = Depends(get_current_author),
):
    return exam_service.get_owned_exam(db, exam_id, author=current_author)


@router.patch("/{exam_id}", response_model=ExamDetail)
def update_exam(
    exam_id: int,
    obj_in: ExamUpdate,
    db: Session = Depends(get_db),
    current_author: User = Depends(get_current_author),
):
    """
    老师修改考试信息，仅限 draft。
    """
    return exam_service.update_exam(
        db, exam_id=exam_id, author=current_author, obj_in=obj_in
    )


@router.delete("/{exam_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exam(
    exam_id: int,
    db: Session = Depends(get_db),
    current_author: User = Depends(get_current_author),
):
    exam_service.delete_exam(db, exam_id=exam_id, author=current_author)
    return None


@router.post("/{exam_id}/start", response_model=ExamDetail)
def start_exam(
    exam_id: int,
    db: Session = Depends(get_db),
    current_author: User = Depends(get_current_author),
):
    """
    开始考试：冻结题目，设置 started_at / deadline。
    """
    return exam_service.start_exam(db, exam_id=exam_id, author=current_author)


@router.post("/{exam_id}/end", response_model=ExamDetail)
def end_exam(
    exam_id: int,
    db: Session = Depends(get_db),
    current_author: User = Depends(get_current_author),
):
    return exam_service.end_exam(db, exam_id=exam_id, author=current_author)
