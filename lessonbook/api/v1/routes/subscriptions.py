from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from lessonbook.api.v1.schemas import CamelModel
from lessonbook.api.v1.serializers import subscription_to_dict
from lessonbook.core.database import get_db
from lessonbook.core.exceptions import ServerError, ValidationError
from lessonbook.core.middleware import get_current_user
from lessonbook.models.user import User
from lessonbook.services.subscription_service import SubscriptionService
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


def get_subscription_service() -> SubscriptionService:
    """Dependency to get subscription service instance"""
    return SubscriptionService()


class SubscriptionCreateRequest(CamelModel):
    type: Optional[str] = None
    price: Optional[float] = None


@router.get("/plans")
async def get_plans(
    subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    """
    Get all available subscription plans.
    Public endpoint - no authentication required.
    """
    return subscription_service.get_plans()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_subscription(
    request: SubscriptionCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    """
    Activate a subscription after payment.
    Requires authentication.
    """
    if not request.type or request.price is None:
        raise ValidationError("Missing required fields")

    try:
        subscription = subscription_service.create_subscription(
            db, current_user.id, request.type, request.price
        )
        return subscription_to_dict(subscription)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"create_subscription: Failure - {e}")
        raise ServerError()


@router.get("/my-subscriptions")
async def get_my_subscriptions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    """Caller's subscriptions, newest first."""
    try:
        subscriptions = subscription_service.list_for_user(db, current_user.id)
        return [subscription_to_dict(s) for s in subscriptions]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"get_my_subscriptions: Failure - {e}")
        raise ServerError()


@router.put("/{subscription_id}/cancel")
async def cancel_subscription(
    subscription_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    """Cancel one of the caller's subscriptions."""
    try:
        subscription = subscription_service.cancel_subscription(db, subscription_id, current_user.id)
        return {
            "message": "Subscription cancelled successfully",
            "subscription": subscription_to_dict(subscription),
        }
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"cancel_subscription: Failure - {e}")
        raise ServerError()
