from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from lessonbook.api.v1.serializers import payment_to_dict
from lessonbook.core.database import get_db
from lessonbook.core.exceptions import ServerError
from lessonbook.core.middleware import require_admin
from lessonbook.models.user import User
from lessonbook.services.admin_service import AdminService
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


def get_admin_service() -> AdminService:
    """Dependency to get admin service instance"""
    return AdminService()


@router.get("/stats")
async def get_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    """
    Dashboard statistics.
    Only admins can use this endpoint.
    """
    logger.info(f"get_stats: Entry - admin: {admin.id}")

    try:
        return admin_service.get_stats(db)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"get_stats: Failure - {e}")
        raise ServerError()


@router.get("/payments")
async def list_payments(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    """
    Every payment, newest first, with user, lesson and subscription populated.
    Only admins can use this endpoint.
    """
    logger.info(f"list_payments: Entry - admin: {admin.id}")

    try:
        payments = admin_service.list_payments(db)
        logger.info(f"list_payments: Success - count: {len(payments)}")
        return [payment_to_dict(p, populate=True, include_user=True) for p in payments]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"list_payments: Failure - {e}")
        raise ServerError()
