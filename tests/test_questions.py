import pytest

from exam_engine.core.errors import AuthorizationError, NotFound, StateConflict, ValidationError
from exam_engine.models.question import QuestionKind
from exam_engine.schemas.question import QuestionCreate, QuestionOption
from exam_engine.services import exam_service, question_service

from tests.conftest import objective, subjective


def _numbers(db, exam):
    return [q.question_number for q in question_service.list_questions(db, exam.id)]


def _prompts(db, exam):
    return [q.prompt for q in question_service.list_questions(db, exam.id)]


def test_add_question_assigns_next_number_and_totals(db_session, make_exam, lecturer):
    exam = make_exam()
    assert exam.total_points == 0

    exam = question_service.add_question(
        db_session, exam_id=exam.id, author=lecturer, obj_in=objective(points=5)
    )
    exam = question_service.add_question(
        db_session, exam_id=exam.id, author=lecturer, obj_in=subjective(points=10)
    )

    assert _numbers(db_session, exam) == [1, 2]
    assert exam.total_points == 15


def test_total_points_tracks_every_add_and_remove(db_session, make_exam, lecturer):
    exam = make_exam()
    points = [3, 1, 4, 1, 5]
    for p in points:
        exam = question_service.add_question(
            db_session, exam_id=exam.id, author=lecturer, obj_in=objective(points=p)
        )
        assert exam.total_points == sum(q.points for q in exam.questions)

    exam = question_service.remove_question(
        db_session, exam_id=exam.id, author=lecturer, question_number=3
    )
    assert exam.total_points == 3 + 1 + 1 + 5
    assert exam.total_points == sum(q.points for q in exam.questions)


def test_remove_question_renumbers_densely_in_order(db_session, make_exam, lecturer):
    exam = make_exam(
        objective(prompt="first"),
        objective(prompt="second"),
        objective(prompt="third"),
    )

    exam = question_service.remove_question(
        db_session, exam_id=exam.id, author=lecturer, question_number=2
    )

    assert _numbers(db_session, exam) == [1, 2]
    assert _prompts(db_session, exam) == ["first", "third"]


def test_remove_first_and_last_keep_sequence(db_session, make_exam, lecturer):
    exam = make_exam(*(objective(prompt=f"q{i}") for i in range(1, 6)))

    question_service.remove_question(db_session, exam_id=exam.id, author=lecturer, question_number=1)
    question_service.remove_question(db_session, exam_id=exam.id, author=lecturer, question_number=4)

    assert _numbers(db_session, exam) == [1, 2, 3]
    assert _prompts(db_session, exam) == ["q2", "q3", "q4"]


def test_remove_unknown_question_is_not_found(db_session, make_exam, lecturer):
    exam = make_exam(objective())
    with pytest.raises(NotFound):
        question_service.remove_question(
            db_session, exam_id=exam.id, author=lecturer, question_number=7
        )


@pytest.mark.parametrize(
    "obj_in",
    [
        # a single option is not a choice
        objective(labels=("A",), correct="A"),
        # correct answer outside the option set
        objective(labels=("A", "B"), correct="C"),
        # duplicate labels
        objective(labels=("A", "A", "B"), correct="A"),
        QuestionCreate(kind=QuestionKind.OBJECTIVE, prompt="no options", correct_answer="A"),
        QuestionCreate(
            kind=QuestionKind.OBJECTIVE,
            prompt="no answer",
            options=[QuestionOption(label="A"), QuestionOption(label="B")],
        ),
        QuestionCreate(
            kind=QuestionKind.SUBJECTIVE,
            prompt="essay with options",
            options=[QuestionOption(label="A"), QuestionOption(label="B")],
        ),
        # essays are graded against reference_answer, never an answer key
        QuestionCreate(kind=QuestionKind.SUBJECTIVE, prompt="essay with key", correct_answer="A"),
    ],
)
def test_incomplete_question_is_rejected(db_session, make_exam, lecturer, obj_in):
    exam = make_exam()
    with pytest.raises(ValidationError):
        question_service.add_question(db_session, exam_id=exam.id, author=lecturer, obj_in=obj_in)

    db_session.rollback()
    assert question_service.list_questions(db_session, exam.id) == []


def test_subjective_keeps_reference_answer_and_no_key(db_session, make_exam):
    exam = make_exam(subjective(reference_answer="Mention entropy"))
    question = question_service.list_questions(db_session, exam.id)[0]

    assert question.kind == QuestionKind.SUBJECTIVE.value
    assert question.correct_answer is None
    assert question.options is None
    assert question.reference_answer == "Mention entropy"


def test_questions_frozen_once_active(db_session, make_exam, lecturer):
    exam = make_exam(objective(), objective(), start=True)

    with pytest.raises(StateConflict):
        question_service.add_question(db_session, exam_id=exam.id, author=lecturer, obj_in=objective())
    with pytest.raises(StateConflict):
        question_service.remove_question(
            db_session, exam_id=exam.id, author=lecturer, question_number=1
        )

    db_session.rollback()
    assert _numbers(db_session, exam) == [1, 2]


def test_questions_frozen_once_ended(db_session, make_exam, lecturer):
    exam = make_exam(objective(), start=True)
    exam_service.end_exam(db_session, exam_id=exam.id, author=lecturer)

    with pytest.raises(StateConflict):
        question_service.add_question(db_session, exam_id=exam.id, author=lecturer, obj_in=objective())


def test_only_owner_or_admin_edits_questions(db_session, make_exam, other_lecturer, admin):
    exam = make_exam()

    with pytest.raises(AuthorizationError):
        question_service.add_question(
            db_session, exam_id=exam.id, author=other_lecturer, obj_in=objective()
        )

    exam = question_service.add_question(db_session, exam_id=exam.id, author=admin, obj_in=objective())
    assert len(exam.questions) == 1
