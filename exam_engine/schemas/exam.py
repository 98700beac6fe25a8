# exam_engine/schemas/exam.py
from datetime import datetime

from pydantic import BaseModel, Field

from exam_engine.models.exam import ExamStatus
from exam_engine.schemas.question import QuestionDetail


class ExamCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    duration_minutes: int = Field(gt=0)
    passing_score: int = Field(default=50, ge=0, le=100)


class ExamUpdate(BaseModel):
    """只更新传入的字段"""
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    duration_minutes: int | None = Field(default=None, gt=0)
    passing_score: int | None = Field(default=None, ge=0, le=100)


class ExamSummary(BaseModel):
    id: int
    author_id: int
    title: str
    description: str | None = None
    duration_minutes: int
    passing_score: int
    total_points: int
    status: ExamStatus
    started_at: datetime | None = None
    deadline: datetime | None = None
    ended_at: datetime | None = None

    model_config = {"from_attributes": True}


class ExamDetail(ExamSummary):
    """作者视图：含正确答案"""
    questions: list[QuestionDetail] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ParticipantExamView(ExamSummary):
    """
    Participant view. Correct and reference answers are blanked until the
    exam has ended (``answers_revealed``).
    """
    questions: list[QuestionDetail] = []
    answers_revealed: bool = False
    has_submitted: bool = False


class AvailableExam(ExamSummary):
    has_submitted: bool = False
