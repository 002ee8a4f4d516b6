import logging
import uuid
from datetime import datetime

from sqlalchemy.orm import Session, joinedload

from lessonbook.core.clock import to_naive_utc, utcnow
from lessonbook.core.exceptions import Forbidden, NoActiveSubscription, NotFound, PastDate
from lessonbook.models.booking import Booking, BookingStatus
from lessonbook.models.user import User, UserRole
from lessonbook.services.subscription_service import SubscriptionService
from lessonbook.services.validation import validate_booking

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("class_date", "class_time", "status", "zoom_link")


class BookingService:
    def __init__(self):
        self.subscriptions = SubscriptionService()
        self.logger = logging.getLogger(__name__)

    def list_bookings(self, db: Session, user: User) -> list[Booking]:
        """Admins see every booking, students their own; soonest class first"""
        self.logger.info(f"list_bookings: Entry - user: {user.id}")

        query = db.query(Booking).options(
            joinedload(Booking.user), joinedload(Booking.subscription)
        )
        if user.role != UserRole.ADMIN:
            query = query.filter(Booking.user_id == user.id)

        bookings = query.order_by(Booking.class_date.asc()).all()
        self.logger.info(f"list_bookings: Success - {len(bookings)} bookings")
        return bookings

    def create_booking(
        self,
        db: Session,
        user_id: str,
        subscription_id: str,
        class_date: datetime,
        class_time: str,
    ) -> Booking:
        self.logger.info(f"create_booking: Entry - user: {user_id}, subscription: {subscription_id}")

        # Read-then-write; nothing stops two concurrent bookings of the same slot
        subscription = self.subscriptions.find_active(db, subscription_id, user_id)
        if not subscription:
            self.logger.warning(f"create_booking: No active subscription - {subscription_id}")
            raise NoActiveSubscription()

        class_date = to_naive_utc(class_date)
        if class_date < utcnow():
            self.logger.warning(f"create_booking: Past date - {class_date.isoformat()}")
            raise PastDate()

        booking = Booking(
            id=str(uuid.uuid4()),
            user_id=user_id,
            subscription_id=subscription.id,
            class_date=class_date,
            class_time=class_time,
            status=BookingStatus.CONFIRMED,
        )
        validate_booking(booking).raise_for_errors()

        db.add(booking)
        db.commit()
        db.refresh(booking)

        self.logger.info(f"create_booking: Success - booking: {booking.id}")
        return booking

    def get_booking(self, db: Session, booking_id: str) -> Booking:
        booking = db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            self.logger.warning(f"get_booking: Not found - {booking_id}")
            raise NotFound("Booking not found")
        return booking

    def cancel_booking(self, db: Session, booking_id: str, user: User) -> Booking:
        self.logger.info(f"cancel_booking: Entry - booking: {booking_id}, user: {user.id}")

        booking = self.get_booking(db, booking_id)
        if booking.user_id != user.id and user.role != UserRole.ADMIN:
            self.logger.warning(f"cancel_booking: Forbidden - booking: {booking_id}, user: {user.id}")
            raise Forbidden()

        booking.status = BookingStatus.CANCELLED
        db.commit()
        db.refresh(booking)

        self.logger.info(f"cancel_booking: Success - booking: {booking_id}")
        return booking

    def update_booking(self, db: Session, booking_id: str, fields: dict) -> Booking:
        """Admin edit of any booking field, validated before commit"""
        self.logger.info(f"update_booking: Entry - booking: {booking_id}, fields: {sorted(fields)}")

        booking = self.get_booking(db, booking_id)
        for key, value in fields.items():
            if key not in UPDATABLE_FIELDS:
                continue
            if key == "class_date" and value is not None:
                value = to_naive_utc(value)
            setattr(booking, key, value)

        result = validate_booking(booking)
        if not result.ok:
            db.rollback()
            result.raise_for_errors()

        db.commit()
        db.refresh(booking)

        self.logger.info(f"update_booking: Success - booking: {booking_id}")
        return booking
