import logging

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from lessonbook.models.booking import Booking
from lessonbook.models.lesson import Lesson
from lessonbook.models.payment import Payment, PaymentStatus
from lessonbook.models.subscription import Subscription, SubscriptionStatus
from lessonbook.models.user import User, UserRole

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def get_stats(self, db: Session) -> dict:
        """Dashboard counters and completed-payment revenue"""
        self.logger.info("get_stats: Entry")

        revenue = db.query(func.coalesce(func.sum(Payment.amount), 0.0)).filter(
            Payment.status == PaymentStatus.COMPLETED
        ).scalar()

        stats = {
            'totalUsers': db.query(User).filter(User.role == UserRole.STUDENT).count(),
            'totalLessons': db.query(Lesson).count(),
            'totalBookings': db.query(Booking).count(),
            'activeSubscriptions': db.query(Subscription).filter(
                Subscription.status == SubscriptionStatus.ACTIVE
            ).count(),
            'totalRevenue': round(float(revenue or 0), 2),
        }
        self.logger.info(f"get_stats: Success - {stats}")
        return stats

    def list_payments(self, db: Session) -> list[Payment]:
        return (
            db.query(Payment)
            .options(
                joinedload(Payment.user),
                joinedload(Payment.lesson),
                joinedload(Payment.subscription),
            )
            .order_by(Payment.created_at.desc())
            .all()
        )
