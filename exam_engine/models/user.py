# exam_engine/models/user.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from exam_engine.db.base import Base

AUTHOR_ROLES = ("lecturer", "admin")
PARTICIPANT_ROLES = ("student",)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False)  # 'student' / 'lecturer' / 'admin'
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_author(self) -> bool:
        return self.role in AUTHOR_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
