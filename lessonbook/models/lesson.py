from sqlalchemy import Column, String, DateTime, Float, Integer, Text
from lessonbook.core.clock import utcnow
from lessonbook.core.database import Base


class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False, default=0)
    level = Column(String, nullable=False, default="beginner", index=True)
    category = Column(String, nullable=False, default="general", index=True)
    duration = Column(Integer, nullable=False, default=60)  # minutes
    created_at = Column(DateTime, default=utcnow, index=True)
