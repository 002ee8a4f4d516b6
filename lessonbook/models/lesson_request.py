from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, Text
from sqlalchemy.orm import relationship
from lessonbook.core.clock import utcnow
from lessonbook.core.database import Base
import enum


class LessonRequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class LessonRequest(Base):
    __tablename__ = "lesson_requests"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    lesson_id = Column(String, ForeignKey("lessons.id"), nullable=False, index=True)
    requested_date = Column(DateTime, nullable=False, index=True)
    requested_time = Column(String, nullable=False)
    status = Column(Enum(LessonRequestStatus), nullable=False, default=LessonRequestStatus.PENDING, index=True)
    message = Column(Text, nullable=False, default="")
    teacher_response = Column(Text, nullable=True)
    payment_id = Column(String, ForeignKey("payments.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("User", back_populates="lesson_requests")
    lesson = relationship("Lesson")
    payment = relationship("Payment")
