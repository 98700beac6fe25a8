"""
Shared fixtures: a throwaway SQLite database per test, users for each role,
a controllable clock and a recording notifier (no Redis needed).
"""

import os
from datetime import datetime, timedelta, timezone

# Must be set before anything imports exam_engine.core.config
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["SWEEPER_ENABLED"] = "false"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from exam_engine import models  # noqa
from exam_engine.core import clock
from exam_engine.db.base import Base
from exam_engine.models.question import QuestionKind
from exam_engine.models.user import User
from exam_engine.schemas.exam import ExamCreate
from exam_engine.schemas.question import QuestionCreate, QuestionOption
from exam_engine.services import exam_service, notifier, question_service


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def fake_clock(monkeypatch):
    fake = FakeClock(datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc))
    monkeypatch.setattr(clock, "utcnow", fake)
    return fake


@pytest.fixture(autouse=True)
def published(monkeypatch):
    """Every exam-ended event published during the test, as (exam_id, ended_at)."""
    events = []

    def record(exam_id, ended_at):
        events.append((exam_id, ended_at))
        return f"job-{len(events)}"

    monkeypatch.setattr(notifier, "publish_exam_ended", record)
    return events


@pytest.fixture
def engine(tmp_path):
    """File-backed so several sessions (and threads) can share it."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'exam.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def _make_user(db, email, name, role):
    user = User(email=email, name=name, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def lecturer(db_session):
    return _make_user(db_session, "lecturer@test.com", "Test Lecturer", "lecturer")


@pytest.fixture
def other_lecturer(db_session):
    return _make_user(db_session, "other@test.com", "Other Lecturer", "lecturer")


@pytest.fixture
def admin(db_session):
    return _make_user(db_session, "admin@test.com", "Test Admin", "admin")


@pytest.fixture
def student(db_session):
    return _make_user(db_session, "student@test.com", "Test Student", "student")


@pytest.fixture
def second_student(db_session):
    return _make_user(db_session, "student2@test.com", "Second Student", "student")


def objective(prompt="Pick one", points=1, correct="A", labels=("A", "B", "C", "D")):
    return QuestionCreate(
        kind=QuestionKind.OBJECTIVE,
        prompt=prompt,
        points=points,
        options=[QuestionOption(label=label, text=f"Option {label}") for label in labels],
        correct_answer=correct,
    )


def subjective(prompt="Explain", points=10, reference_answer=None):
    return QuestionCreate(
        kind=QuestionKind.SUBJECTIVE,
        prompt=prompt,
        points=points,
        reference_answer=reference_answer,
    )


@pytest.fixture
def make_exam(db_session, lecturer, fake_clock):
    """Build a draft exam with the given questions, optionally started."""

    def _make(*questions, duration=30, start=False, author=None, title="Midterm"):
        author = author or lecturer
        exam = exam_service.create_exam(
            db_session,
            author=author,
            obj_in=ExamCreate(title=title, duration_minutes=duration),
        )
        for q in questions:
            question_service.add_question(db_session, exam_id=exam.id, author=author, obj_in=q)
        if start:
            exam = exam_service.start_exam(db_session, exam_id=exam.id, author=author)
        db_session.refresh(exam)
        return exam

    return _make
