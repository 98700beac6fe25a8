# exam_engine/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from exam_engine.core.config import settings
from exam_engine.core.errors import ExamEngineError, StoreUnavailable
from exam_engine.core.logging_config import configure_logging
from exam_engine.db.base import Base
from exam_engine.db.session import engine
from exam_engine.api.v1.endpoints import exams, questions, submissions, scores, health
from exam_engine import models  # noqa
from exam_engine.workers.sweeper import ExpirySweeper

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

sweeper = ExpirySweeper()


@app.exception_handler(ExamEngineError)
async def handle_exam_engine_error(request: Request, exc: ExamEngineError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(OperationalError)
async def handle_store_unavailable(request: Request, exc: OperationalError):
    logger.error(f"Database unavailable during {request.method} {request.url.path}: {exc}")
    error = StoreUnavailable("Exam store is unavailable")
    return JSONResponse(status_code=error.status_code, content={"detail": error.message})


@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)
    if settings.SWEEPER_ENABLED:
        sweeper.start()


@app.on_event("shutdown")
def on_shutdown():
    sweeper.stop()


app.include_router(exams.router, prefix="/api/v1")
app.include_router(questions.router, prefix="/api/v1")
app.include_router(submissions.router, prefix="/api/v1")
app.include_router(scores.router, prefix="/api/v1")
app.include_router(health.router, prefix="/api/v1")
