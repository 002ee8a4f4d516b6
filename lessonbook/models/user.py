from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, Table
from sqlalchemy.orm import relationship
from lessonbook.core.clock import utcnow
from lessonbook.core.database import Base
import enum


class UserRole(str, enum.Enum):
    STUDENT = "student"
    ADMIN = "admin"


user_purchased_lessons = Table(
    "user_purchased_lessons",
    Base.metadata,
    Column("user_id", String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("lesson_id", String, ForeignKey("lessons.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)  # stored lowercased
    password = Column(String, nullable=False)  # bcrypt hash, never plaintext
    role = Column(Enum(UserRole), nullable=False, default=UserRole.STUDENT, index=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    purchased_lessons = relationship("Lesson", secondary=user_purchased_lessons, order_by="Lesson.created_at")
    subscriptions = relationship("Subscription", back_populates="user", order_by="Subscription.created_at")
    bookings = relationship("Booking", back_populates="user")
    lesson_requests = relationship("LessonRequest", back_populates="user")
    payments = relationship("Payment", back_populates="user")
