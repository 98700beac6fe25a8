# exam_engine/schemas/submission.py
from datetime import datetime

from pydantic import BaseModel, Field


class AnswerIn(BaseModel):
    question_number: int = Field(ge=1)
    answer: str


class SubmissionCreate(BaseModel):
    answers: list[AnswerIn]


class AnswerPublic(BaseModel):
    question_number: int
    response: str
    is_correct: bool | None = None
    points_awarded: int

    model_config = {"from_attributes": True}


class SubmissionPublic(BaseModel):
    id: int
    exam_id: int
    participant_id: int
    total_score: int
    auto_graded: bool
    submitted_at: datetime
    graded_at: datetime | None = None
    answers: list[AnswerPublic] = []

    model_config = {"from_attributes": True}


class ScoreSummary(BaseModel):
    """提交后返回的成绩摘要"""
    submission_id: int
    exam_id: int
    participant_id: int
    total_score: int
    total_points: int
    percentage: float
    passed: bool
    auto_graded: bool
    time_taken_minutes: float | None = None
    answers: list[AnswerPublic] = []


class GradeUpdate(BaseModel):
    """教师人工评分"""
    points_awarded: int
