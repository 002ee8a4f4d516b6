from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from lessonbook.api.v1.schemas import CamelModel
from lessonbook.api.v1.serializers import booking_to_dict
from lessonbook.core.database import get_db
from lessonbook.core.exceptions import ServerError
from lessonbook.core.middleware import get_current_user, require_admin
from lessonbook.models.booking import BookingStatus
from lessonbook.models.user import User
from lessonbook.services.booking_service import BookingService
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


def get_booking_service() -> BookingService:
    """Dependency to get booking service instance"""
    return BookingService()


class BookingCreateRequest(CamelModel):
    subscription_id: str
    class_date: datetime
    class_time: str


class BookingUpdateRequest(CamelModel):
    class_date: Optional[datetime] = None
    class_time: Optional[str] = None
    status: Optional[BookingStatus] = None
    zoom_link: Optional[str] = None


@router.get("")
async def list_bookings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
):
    """
    Caller's bookings, or every booking for admins.
    Ordered by class date ascending.
    """
    try:
        bookings = booking_service.list_bookings(db, current_user)
        return [booking_to_dict(booking, populate=True) for booking in bookings]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"list_bookings: Failure - {e}")
        raise ServerError()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: BookingCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
):
    """Book a class against one of the caller's active subscriptions."""
    try:
        booking = booking_service.create_booking(
            db,
            user_id=current_user.id,
            subscription_id=request.subscription_id,
            class_date=request.class_date,
            class_time=request.class_time,
        )
        return booking_to_dict(booking)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"create_booking: Failure - {e}")
        raise ServerError()


@router.put("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
):
    """Cancel a booking. Owner or admin."""
    try:
        booking = booking_service.cancel_booking(db, booking_id, current_user)
        return {"message": "Booking cancelled successfully", "booking": booking_to_dict(booking)}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"cancel_booking: Failure - {e}")
        raise ServerError()


@router.put("/{booking_id}")
async def update_booking(
    booking_id: str,
    request: BookingUpdateRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service)
):
    """Edit booking fields (status, zoom link, date/time). Admin only."""
    logger.info(f"update_booking: Entry - admin: {admin.id}, booking: {booking_id}")

    try:
        booking = booking_service.update_booking(db, booking_id, request.model_dump(exclude_unset=True))
        return booking_to_dict(booking)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"update_booking: Failure - {e}")
        raise ServerError()
