# Package marker
from exam_engine.db.session import engine
from exam_engine.db.base import Base


def init_db():
    from exam_engine import models  # noqa

    Base.metadata.create_all(bind=engine)
