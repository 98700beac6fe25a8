# exam_engine/models/exam.py
import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from exam_engine.core.clock import ensure_utc
from exam_engine.db.base import Base


class ExamStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ENDED = "ended"


class Exam(Base):
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    duration_minutes = Column(Integer, nullable=False)
    passing_score = Column(Integer, nullable=False, default=50)
    total_points = Column(Integer, nullable=False, default=0)

    # 状态：draft / active / ended
    status = Column(String(20), nullable=False, default=ExamStatus.DRAFT.value, index=True)

    # timing, frozen by start / end
    started_at = Column(DateTime(timezone=True), nullable=True)
    deadline = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    questions = relationship(
        "Question",
        back_populates="exam",
        order_by="Question.question_number",
        cascade="all, delete-orphan",
    )
    submissions = relationship(
        "Submission",
        back_populates="exam",
        order_by="Submission.submitted_at",
        cascade="all, delete-orphan",
    )

    def is_open_at(self, now: datetime) -> bool:
        """Active and still before the wall-clock deadline."""
        if self.status != ExamStatus.ACTIVE.value or self.deadline is None:
            return False
        return now < ensure_utc(self.deadline)

    def is_expired_at(self, now: datetime) -> bool:
        if self.deadline is None:
            return False
        return now >= ensure_utc(self.deadline)
