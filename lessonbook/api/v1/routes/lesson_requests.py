from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from lessonbook.api.v1.schemas import CamelModel
from lessonbook.api.v1.serializers import lesson_request_to_dict
from lessonbook.core.database import get_db
from lessonbook.core.exceptions import ServerError
from lessonbook.core.middleware import get_current_user, require_admin
from lessonbook.models.lesson_request import LessonRequestStatus
from lessonbook.models.user import User
from lessonbook.services.lesson_request_service import LessonRequestService
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


def get_lesson_request_service() -> LessonRequestService:
    """Dependency to get lesson request service instance"""
    return LessonRequestService()


class LessonRequestCreate(CamelModel):
    lesson_id: str
    requested_date: datetime
    requested_time: str
    message: Optional[str] = None


class TeacherResponseRequest(CamelModel):
    teacher_response: Optional[str] = None


def _respond(message: str, request) -> dict:
    return {"message": message, "request": lesson_request_to_dict(request)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_request(
    request: LessonRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: LessonRequestService = Depends(get_lesson_request_service)
):
    """Ask for a lesson at a given date and time. Starts out pending."""
    try:
        created = service.create_request(
            db,
            user_id=current_user.id,
            lesson_id=request.lesson_id,
            requested_date=request.requested_date,
            requested_time=request.requested_time,
            message=request.message,
        )
        return lesson_request_to_dict(created)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"create_request: Failure - {e}")
        raise ServerError()


@router.get("/my-requests")
async def get_my_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: LessonRequestService = Depends(get_lesson_request_service)
):
    try:
        return [lesson_request_to_dict(r) for r in service.list_for_user(db, current_user.id)]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"get_my_requests: Failure - {e}")
        raise ServerError()


@router.get("/pending")
async def get_pending_requests(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    service: LessonRequestService = Depends(get_lesson_request_service)
):
    """Pending requests, earliest requested date first. Admin only."""
    try:
        return [lesson_request_to_dict(r) for r in service.list_pending(db)]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"get_pending_requests: Failure - {e}")
        raise ServerError()


@router.get("")
async def list_requests(
    request_status: Optional[LessonRequestStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    service: LessonRequestService = Depends(get_lesson_request_service)
):
    """All requests with an optional status filter. Admin only."""
    try:
        return [lesson_request_to_dict(r) for r in service.list_all(db, request_status)]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"list_requests: Failure - {e}")
        raise ServerError()


@router.get("/{request_id}")
async def get_request(
    request_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: LessonRequestService = Depends(get_lesson_request_service)
):
    """Single request. Owner or admin."""
    try:
        return lesson_request_to_dict(service.get_request_for_user(db, request_id, current_user))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"get_request: Failure - {e}")
        raise ServerError()


@router.put("/{request_id}/approve")
async def approve_request(
    request_id: str,
    body: Optional[TeacherResponseRequest] = None,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    service: LessonRequestService = Depends(get_lesson_request_service)
):
    logger.info(f"approve_request: Entry - admin: {admin.id}, request: {request_id}")

    try:
        teacher_response = body.teacher_response if body else None
        return _respond("Request approved", service.approve(db, request_id, teacher_response))
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"approve_request: Failure - {e}")
        raise ServerError()


@router.put("/{request_id}/reject")
async def reject_request(
    request_id: str,
    body: Optional[TeacherResponseRequest] = None,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    service: LessonRequestService = Depends(get_lesson_request_service)
):
    logger.info(f"reject_request: Entry - admin: {admin.id}, request: {request_id}")

    try:
        teacher_response = body.teacher_response if body else None
        return _respond("Request rejected", service.reject(db, request_id, teacher_response))
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"reject_request: Failure - {e}")
        raise ServerError()


@router.put("/{request_id}/cancel")
async def cancel_request(
    request_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: LessonRequestService = Depends(get_lesson_request_service)
):
    """Withdraw a pending request. Owner only."""
    try:
        return _respond("Request cancelled", service.cancel(db, request_id, current_user))
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"cancel_request: Failure - {e}")
        raise ServerError()
