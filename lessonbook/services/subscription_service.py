import logging
import uuid
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from lessonbook.core.clock import utcnow
from lessonbook.core.exceptions import NotFound, ValidationError
from lessonbook.models.subscription import (PLAN_DURATIONS, Subscription,
                                            SubscriptionStatus,
                                            SubscriptionType)
from lessonbook.services.validation import validate_subscription

logger = logging.getLogger(__name__)


PLANS = [
    {
        'id': 'monthly',
        'type': 'monthly',
        'name': 'Monthly Speaking Class',
        'price': 49.99,
        'description': 'Access to speaking classes for one month',
        'duration': PLAN_DURATIONS[SubscriptionType.MONTHLY],
    },
    {
        'id': 'weekly',
        'type': 'weekly',
        'name': 'Weekly Speaking Class',
        'price': 19.99,
        'description': 'Access to speaking classes for one week',
        'duration': PLAN_DURATIONS[SubscriptionType.WEEKLY],
    },
]


def parse_plan_type(value) -> SubscriptionType:
    try:
        return SubscriptionType(value)
    except ValueError:
        raise ValidationError(f"Unknown subscription type: {value}")


class SubscriptionService:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def get_plans(self) -> list[dict]:
        """Static plan catalogue"""
        return [dict(plan) for plan in PLANS]

    def create_subscription(
        self,
        db: Session,
        user_id: str,
        plan_type,
        price: float,
        start_date: datetime = None,
        commit: bool = True,
    ) -> Subscription:
        """
        Create an active subscription lasting the plan's duration from now.
        ``commit=False`` leaves the row pending in the session for callers
        that write more in the same unit of work.
        """
        self.logger.info(f"create_subscription: Entry - user: {user_id}, type: {plan_type}")

        subscription_type = parse_plan_type(plan_type)
        start = start_date or utcnow()
        subscription = Subscription(
            id=str(uuid.uuid4()),
            user_id=user_id,
            type=subscription_type,
            price=price,
            status=SubscriptionStatus.ACTIVE,
            start_date=start,
            end_date=start + timedelta(days=PLAN_DURATIONS[subscription_type]),
            created_at=start,
        )
        validate_subscription(subscription).raise_for_errors()

        db.add(subscription)
        if commit:
            db.commit()
            db.refresh(subscription)

        self.logger.info(f"create_subscription: Success - subscription: {subscription.id}")
        return subscription

    def list_for_user(self, db: Session, user_id: str) -> list[Subscription]:
        return (
            db.query(Subscription)
            .filter(Subscription.user_id == user_id)
            .order_by(Subscription.created_at.desc())
            .all()
        )

    def find_active(self, db: Session, subscription_id: str, user_id: str):
        return db.query(Subscription).filter(
            Subscription.id == subscription_id,
            Subscription.user_id == user_id,
            Subscription.status == SubscriptionStatus.ACTIVE,
        ).first()

    def cancel_subscription(self, db: Session, subscription_id: str, user_id: str) -> Subscription:
        """Owner-only; a subscription owned by someone else reads as missing"""
        self.logger.info(f"cancel_subscription: Entry - subscription: {subscription_id}, user: {user_id}")

        subscription = db.query(Subscription).filter(
            Subscription.id == subscription_id,
            Subscription.user_id == user_id,
        ).first()
        if not subscription:
            self.logger.warning(f"cancel_subscription: Not found - {subscription_id}")
            raise NotFound("Subscription not found")

        subscription.status = SubscriptionStatus.CANCELLED
        db.commit()
        db.refresh(subscription)

        self.logger.info(f"cancel_subscription: Success - subscription: {subscription_id}")
        return subscription
