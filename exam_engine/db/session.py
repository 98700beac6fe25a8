# exam_engine/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from exam_engine.core.config import settings


def _engine_options(url: str) -> dict:
    options = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        # SQLite 需要特殊配置来处理多线程（sweeper 线程共用同一个库）
        options["connect_args"] = {"check_same_thread": False}
    return options


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI 依赖：每个请求一个 session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
