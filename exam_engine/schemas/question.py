# exam_engine/schemas/question.py
from pydantic import BaseModel, Field

from exam_engine.models.question import QuestionKind


class QuestionOption(BaseModel):
    label: str = Field(min_length=1, max_length=50)
    text: str = ""


class QuestionCreate(BaseModel):
    kind: QuestionKind
    prompt: str = Field(min_length=1)
    points: int = Field(default=1, ge=1)
    options: list[QuestionOption] | None = None
    correct_answer: str | None = None
    reference_answer: str | None = None


class QuestionPublic(BaseModel):
    """学生可见的题目（不含答案）"""
    question_number: int
    kind: QuestionKind
    prompt: str
    points: int
    options: list[QuestionOption] | None = None

    model_config = {"from_attributes": True}


class QuestionDetail(QuestionPublic):
    """教师可见的完整题目"""
    correct_answer: str | None = None
    reference_answer: str | None = None
