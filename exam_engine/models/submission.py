# exam_engine/models/submission.py
from sqlalchemy import (
    Column,
    Integer,
    Boolean,
    Text,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from exam_engine.db.base import Base


class Submission(Base):
    __tablename__ = "submissions"
    # one submission per participant per exam, enforced by the store
    __table_args__ = (
        UniqueConstraint("exam_id", "participant_id", name="uq_submission_exam_participant"),
    )

    id = Column(Integer, primary_key=True, index=True)

    exam_id = Column(
        Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    participant_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    total_score = Column(Integer, nullable=False, default=0)
    auto_graded = Column(Boolean, nullable=False, default=False)

    submitted_at = Column(DateTime(timezone=True), nullable=False)
    # 老师最近一次人工评分
    graded_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    exam = relationship("Exam", back_populates="submissions")
    answers = relationship(
        "Answer",
        back_populates="submission",
        order_by="Answer.question_number",
        cascade="all, delete-orphan",
    )


class Answer(Base):
    __tablename__ = "answers"
    __table_args__ = (
        UniqueConstraint("submission_id", "question_number", name="uq_answer_submission_question"),
    )

    id = Column(Integer, primary_key=True, index=True)
    submission_id = Column(
        Integer, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False, index=True
    )

    question_number = Column(Integer, nullable=False)
    response = Column(Text, nullable=False)

    # None until a subjective answer is graded
    is_correct = Column(Boolean, nullable=True)
    points_awarded = Column(Integer, nullable=False, default=0)

    submission = relationship("Submission", back_populates="answers")
