from sqlalchemy import CheckConstraint, Column, String, DateTime, Enum, Float, ForeignKey
from sqlalchemy.orm import relationship
from lessonbook.core.clock import utcnow
from lessonbook.core.database import Base
import enum


class PaymentType(str, enum.Enum):
    LESSON = "lesson"
    SUBSCRIPTION = "subscription"


class PaymentMethod(str, enum.Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        # Exactly one purchase target per payment
        CheckConstraint(
            "(lesson_id IS NULL) <> (subscription_id IS NULL)",
            name="ck_payments_single_target",
        ),
    )

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(Enum(PaymentType), nullable=False)
    amount = Column(Float, nullable=False)
    payment_method = Column(Enum(PaymentMethod), nullable=False)
    transaction_id = Column(String, nullable=False, unique=True, index=True)
    status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING, index=True)
    lesson_id = Column(String, ForeignKey("lessons.id"), nullable=True)
    subscription_id = Column(String, ForeignKey("subscriptions.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)

    # Relationships
    user = relationship("User", back_populates="payments")
    lesson = relationship("Lesson")
    subscription = relationship("Subscription")
