# exam_engine/core/errors.py
"""
Typed failures raised by the service layer.

Every operation reports problems through one of these; the API layer turns
them into HTTP responses (see ``exam_engine.main``) and the sweeper logs them.
"""


class ExamEngineError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ExamEngineError):
    """Malformed input: missing fields, out-of-range points, incomplete options."""

    status_code = 422


class NotFound(ExamEngineError):
    status_code = 404


class AuthorizationError(ExamEngineError):
    """Caller does not own the exam it is trying to manage."""

    status_code = 403


class StateConflict(ExamEngineError):
    """Operation is not valid for the exam's current state."""

    status_code = 409


class StoreUnavailable(ExamEngineError):
    status_code = 503
