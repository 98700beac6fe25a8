# exam_engine/models/question.py
import enum

from sqlalchemy import Column, Integer, String, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship

from exam_engine.db.base import Base


class QuestionKind(str, enum.Enum):
    OBJECTIVE = "objective"
    SUBJECTIVE = "subjective"


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    exam_id = Column(
        Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # 1..N, dense; re-sequenced on removal
    question_number = Column(Integer, nullable=False)
    kind = Column(String(20), nullable=False)
    prompt = Column(Text, nullable=False)
    points = Column(Integer, nullable=False, default=1)

    # objective only: [{"label": "A", "text": "..."}, ...]
    options = Column(JSON, nullable=True)
    correct_answer = Column(String(50), nullable=True)

    # subjective only, for graders
    reference_answer = Column(Text, nullable=True)

    exam = relationship("Exam", back_populates="questions")

    @property
    def is_objective(self) -> bool:
        return self.kind == QuestionKind.OBJECTIVE.value
