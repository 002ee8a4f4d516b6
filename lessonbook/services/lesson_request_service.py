import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from lessonbook.core.clock import to_naive_utc, utcnow
from lessonbook.core.exceptions import Forbidden, InvalidState, NotFound, PastDate
from lessonbook.models.lesson_request import LessonRequest, LessonRequestStatus
from lessonbook.models.user import User, UserRole
from lessonbook.services.lesson_service import LessonService
from lessonbook.services.validation import validate_lesson_request

logger = logging.getLogger(__name__)


class LessonRequestService:
    """
    Approval workflow for one-off lesson requests.

    ``pending`` is the only state with outgoing transitions:
    approve/reject (admin) and cancel (owner). Everything else is terminal.
    """

    def __init__(self):
        self.lessons = LessonService()
        self.logger = logging.getLogger(__name__)

    def _query(self, db: Session):
        return db.query(LessonRequest).options(
            joinedload(LessonRequest.user), joinedload(LessonRequest.lesson)
        )

    def create_request(
        self,
        db: Session,
        user_id: str,
        lesson_id: str,
        requested_date: datetime,
        requested_time: str,
        message: Optional[str] = None,
    ) -> LessonRequest:
        self.logger.info(f"create_request: Entry - user: {user_id}, lesson: {lesson_id}")

        self.lessons.get_lesson(db, lesson_id)

        requested_date = to_naive_utc(requested_date)
        if requested_date < utcnow():
            self.logger.warning(f"create_request: Past date - {requested_date.isoformat()}")
            raise PastDate()

        request = LessonRequest(
            id=str(uuid.uuid4()),
            user_id=user_id,
            lesson_id=lesson_id,
            requested_date=requested_date,
            requested_time=requested_time,
            message=(message or "").strip(),
            status=LessonRequestStatus.PENDING,
        )
        validate_lesson_request(request).raise_for_errors()

        db.add(request)
        db.commit()

        self.logger.info(f"create_request: Success - request: {request.id}")
        return self.get_request(db, request.id)

    def list_for_user(self, db: Session, user_id: str) -> list[LessonRequest]:
        return (
            self._query(db)
            .filter(LessonRequest.user_id == user_id)
            .order_by(LessonRequest.created_at.desc())
            .all()
        )

    def list_pending(self, db: Session) -> list[LessonRequest]:
        """Pending requests, earliest requested date first"""
        return (
            self._query(db)
            .filter(LessonRequest.status == LessonRequestStatus.PENDING)
            .order_by(LessonRequest.requested_date.asc())
            .all()
        )

    def list_all(self, db: Session, status: Optional[LessonRequestStatus] = None) -> list[LessonRequest]:
        query = self._query(db)
        if status is not None:
            query = query.filter(LessonRequest.status == status)
        return query.order_by(LessonRequest.created_at.desc()).all()

    def get_request(self, db: Session, request_id: str) -> LessonRequest:
        request = self._query(db).filter(LessonRequest.id == request_id).first()
        if not request:
            self.logger.warning(f"get_request: Not found - {request_id}")
            raise NotFound("Request not found")
        return request

    def get_request_for_user(self, db: Session, request_id: str, user: User) -> LessonRequest:
        request = self.get_request(db, request_id)
        if request.user_id != user.id and user.role != UserRole.ADMIN:
            self.logger.warning(f"get_request_for_user: Forbidden - request: {request_id}, user: {user.id}")
            raise Forbidden()
        return request

    def _transition(
        self,
        db: Session,
        request: LessonRequest,
        status: LessonRequestStatus,
        teacher_response: Optional[str] = None,
        error_message: str = "Request is not pending",
    ) -> LessonRequest:
        if request.status != LessonRequestStatus.PENDING:
            self.logger.warning(
                f"_transition: Invalid state - request: {request.id}, "
                f"from: {request.status.value}, to: {status.value}"
            )
            raise InvalidState(error_message)

        request.status = status
        if teacher_response:
            request.teacher_response = teacher_response.strip()
        request.updated_at = utcnow()
        validate_lesson_request(request).raise_for_errors()

        db.commit()
        db.refresh(request)

        self.logger.info(f"_transition: Success - request: {request.id}, status: {status.value}")
        return request

    def approve(self, db: Session, request_id: str, teacher_response: Optional[str] = None) -> LessonRequest:
        self.logger.info(f"approve: Entry - request: {request_id}")
        request = self.get_request(db, request_id)
        return self._transition(db, request, LessonRequestStatus.APPROVED, teacher_response)

    def reject(self, db: Session, request_id: str, teacher_response: Optional[str] = None) -> LessonRequest:
        self.logger.info(f"reject: Entry - request: {request_id}")
        request = self.get_request(db, request_id)
        return self._transition(db, request, LessonRequestStatus.REJECTED, teacher_response)

    def cancel(self, db: Session, request_id: str, user: User) -> LessonRequest:
        """Owner-only, even administrators cannot cancel on a student's behalf"""
        self.logger.info(f"cancel: Entry - request: {request_id}, user: {user.id}")

        request = self.get_request(db, request_id)
        if request.user_id != user.id:
            self.logger.warning(f"cancel: Forbidden - request: {request_id}, user: {user.id}")
            raise Forbidden()

        return self._transition(
            db, request, LessonRequestStatus.CANCELLED,
            error_message="Can only cancel pending requests",
        )
