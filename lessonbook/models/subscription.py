from sqlalchemy import Column, String, DateTime, Enum, Float, ForeignKey
from sqlalchemy.orm import relationship
from lessonbook.core.clock import utcnow
from lessonbook.core.database import Base
import enum


class SubscriptionType(str, enum.Enum):
    MONTHLY = "monthly"
    WEEKLY = "weekly"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


# Days of access bought by each plan
PLAN_DURATIONS = {
    SubscriptionType.MONTHLY: 30,
    SubscriptionType.WEEKLY: 7,
}


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(Enum(SubscriptionType), nullable=False)
    price = Column(Float, nullable=False)
    status = Column(Enum(SubscriptionStatus), nullable=False, default=SubscriptionStatus.ACTIVE, index=True)
    start_date = Column(DateTime, nullable=False, default=utcnow)
    end_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)

    # Relationships
    user = relationship("User", back_populates="subscriptions")
