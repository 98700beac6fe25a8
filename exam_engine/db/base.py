# exam_engine/db/base.py
from sqlalchemy.orm import declarative_base

# Models register themselves on import; ``exam_engine.models`` pulls them all in.
Base = declarative_base()
