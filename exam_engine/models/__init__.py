# Package marker
from exam_engine.models.user import User  # noqa
from exam_engine.models.exam import Exam, ExamStatus  # noqa
from exam_engine.models.question import Question, QuestionKind  # noqa
from exam_engine.models.submission import Submission, Answer  # noqa
