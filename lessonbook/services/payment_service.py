import json
import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from lessonbook.core.exceptions import Forbidden, NotFound, ValidationError
from lessonbook.models.payment import Payment, PaymentMethod, PaymentStatus
from lessonbook.models.user import User
from lessonbook.payments.types import CardIntent, LessonPurchase, PurchaseTarget, SubscriptionPurchase, parse_target
from lessonbook.services.lesson_service import LessonService
from lessonbook.services.subscription_service import SubscriptionService
from lessonbook.services.validation import validate_payment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LessonGrant:
    lesson_id: str


@dataclass(frozen=True)
class SubscriptionGrant:
    subscription_id: str


Entitlement = Union[LessonGrant, SubscriptionGrant]


def encode_custom(user_id: str, target: PurchaseTarget) -> str:
    """Opaque payload carried through the wallet redirect"""
    return json.dumps({
        "userId": user_id,
        "type": target.payment_type.value,
        "itemId": target.item_id,
    })


def decode_custom(custom: Optional[str]):
    """Returns (user_id, target); raises ValidationError on a malformed payload"""
    try:
        data = json.loads(custom or "")
        user_id = data["userId"]
    except (ValueError, TypeError, KeyError):
        raise ValidationError("Malformed payment payload")
    return user_id, parse_target(data.get("type"), data.get("itemId"))


class PaymentService:
    def __init__(self):
        self.lessons = LessonService()
        self.subscriptions = SubscriptionService()
        self.logger = logging.getLogger(__name__)

    def get_by_transaction(self, db: Session, transaction_id: str) -> Optional[Payment]:
        return db.query(Payment).filter(Payment.transaction_id == transaction_id).first()

    def card_intent_target(
        self,
        intent: CardIntent,
        user_id: str,
        requested: Optional[PurchaseTarget] = None,
    ) -> PurchaseTarget:
        """
        The purchase an intent was opened for, read from the metadata stamped
        on it at creation. Only the user who opened it may claim it, and a
        requested target must match what was paid for.
        """
        metadata = intent.metadata or {}
        if metadata.get("userId") != user_id:
            self.logger.warning(f"card_intent_target: Foreign intent - intent: {intent.id}, user: {user_id}")
            raise Forbidden("Payment belongs to another user")

        target = parse_target(metadata.get("type"), metadata.get("itemId"))
        if requested is not None and requested != target:
            self.logger.warning(f"card_intent_target: Target mismatch - intent: {intent.id}, requested: {requested}")
            raise ValidationError("Payment does not match the requested item")
        return target

    def check_target(self, db: Session, target: PurchaseTarget):
        """Fail early when the purchased lesson does not exist"""
        if isinstance(target, LessonPurchase):
            self.lessons.get_lesson(db, target.lesson_id)

    def grant_entitlement(self, db: Session, user: User, target: PurchaseTarget, amount: float) -> Entitlement:
        """Add the lesson to the user's purchases, or open an active subscription"""
        self.logger.info(f"grant_entitlement: Entry - user: {user.id}, target: {target}")

        if isinstance(target, LessonPurchase):
            lesson = self.lessons.get_lesson(db, target.lesson_id)
            if lesson not in user.purchased_lessons:
                user.purchased_lessons.append(lesson)
            db.commit()
            entitlement = LessonGrant(lesson_id=lesson.id)
        elif isinstance(target, SubscriptionPurchase):
            subscription = self.subscriptions.create_subscription(db, user.id, target.plan, amount)
            entitlement = SubscriptionGrant(subscription_id=subscription.id)
        else:
            raise ValidationError(f"Unsupported purchase target: {target!r}")

        self.logger.info(f"grant_entitlement: Success - user: {user.id}, entitlement: {entitlement}")
        return entitlement

    def record_payment(
        self,
        db: Session,
        user_id: str,
        target: PurchaseTarget,
        entitlement: Entitlement,
        amount: float,
        method: PaymentMethod,
        transaction_id: str,
    ) -> Payment:
        payment = Payment(
            id=str(uuid.uuid4()),
            user_id=user_id,
            type=target.payment_type,
            amount=amount,
            payment_method=method,
            transaction_id=transaction_id,
            status=PaymentStatus.COMPLETED,
            lesson_id=entitlement.lesson_id if isinstance(entitlement, LessonGrant) else None,
            subscription_id=entitlement.subscription_id if isinstance(entitlement, SubscriptionGrant) else None,
        )
        validate_payment(payment).raise_for_errors()

        db.add(payment)
        db.commit()
        db.refresh(payment)
        return payment

    def complete_purchase(
        self,
        db: Session,
        user_id: str,
        target: PurchaseTarget,
        amount: float,
        method: PaymentMethod,
        transaction_id: str,
    ) -> Payment:
        """
        Grant entitlement, then record a completed payment.

        Idempotent on ``transaction_id``: a processor transaction that already
        has a payment row is returned as-is without granting again, and only
        to the user it was recorded for. The grant and the record are two
        commits; a crash between them leaves a grant with no payment row.
        """
        self.logger.info(
            f"complete_purchase: Entry - user: {user_id}, method: {method.value}, "
            f"transaction: {transaction_id}"
        )

        existing = self.get_by_transaction(db, transaction_id)
        if existing:
            if existing.user_id != user_id:
                self.logger.warning(f"complete_purchase: Foreign transaction - transaction: {transaction_id}")
                raise Forbidden("Payment belongs to another user")
            self.logger.info(f"complete_purchase: Already recorded - transaction: {transaction_id}")
            return existing

        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound("User not found")

        entitlement = self.grant_entitlement(db, user, target, amount)
        try:
            payment = self.record_payment(db, user_id, target, entitlement, amount, method, transaction_id)
        except IntegrityError:
            db.rollback()
            existing = self.get_by_transaction(db, transaction_id)
            if existing is None:
                raise
            self.logger.warning(f"complete_purchase: Concurrent record - transaction: {transaction_id}")
            return existing

        self.logger.info(f"complete_purchase: Success - payment: {payment.id}")
        return payment

    def history(self, db: Session, user_id: str) -> list[Payment]:
        return (
            db.query(Payment)
            .options(joinedload(Payment.lesson), joinedload(Payment.subscription))
            .filter(Payment.user_id == user_id)
            .order_by(Payment.created_at.desc())
            .all()
        )
