from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from lessonbook.api.v1.schemas import CamelModel
from lessonbook.api.v1.serializers import lesson_to_dict
from lessonbook.core.database import get_db
from lessonbook.core.exceptions import ServerError
from lessonbook.core.middleware import require_admin
from lessonbook.models.user import User
from lessonbook.services.lesson_service import LessonService
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


def get_lesson_service() -> LessonService:
    """Dependency to get lesson service instance"""
    return LessonService()


class LessonCreateRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    level: Optional[str] = None
    category: Optional[str] = None
    duration: Optional[int] = None


class LessonUpdateRequest(LessonCreateRequest):
    pass


@router.get("")
async def list_lessons(
    level: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    lesson_service: LessonService = Depends(get_lesson_service)
):
    """
    List lessons, newest first.
    Public endpoint - optional level/category filters and title/description search.
    """
    try:
        lessons = lesson_service.list_lessons(db, level=level, category=category, search=search)
        return [lesson_to_dict(lesson) for lesson in lessons]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"list_lessons: Failure - {e}")
        raise ServerError()


@router.get("/{lesson_id}")
async def get_lesson(
    lesson_id: str,
    db: Session = Depends(get_db),
    lesson_service: LessonService = Depends(get_lesson_service)
):
    try:
        return lesson_to_dict(lesson_service.get_lesson(db, lesson_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"get_lesson: Failure - {e}")
        raise ServerError()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_lesson(
    request: LessonCreateRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    lesson_service: LessonService = Depends(get_lesson_service)
):
    """Create a lesson. Admin only."""
    logger.info(f"create_lesson: Entry - admin: {admin.id}")

    try:
        lesson = lesson_service.create_lesson(db, **request.model_dump())
        return lesson_to_dict(lesson)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"create_lesson: Failure - {e}")
        raise ServerError()


@router.put("/{lesson_id}")
async def update_lesson(
    lesson_id: str,
    request: LessonUpdateRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    lesson_service: LessonService = Depends(get_lesson_service)
):
    """Update the given lesson fields. Admin only."""
    logger.info(f"update_lesson: Entry - admin: {admin.id}, lesson: {lesson_id}")

    try:
        lesson = lesson_service.update_lesson(db, lesson_id, request.model_dump(exclude_unset=True))
        return lesson_to_dict(lesson)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"update_lesson: Failure - {e}")
        raise ServerError()


@router.delete("/{lesson_id}")
async def delete_lesson(
    lesson_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    lesson_service: LessonService = Depends(get_lesson_service)
):
    """
    Delete a lesson. Admin only.
    A lesson that payments or lesson requests still reference answers 409
    and stays in the catalogue.
    """
    logger.info(f"delete_lesson: Entry - admin: {admin.id}, lesson: {lesson_id}")

    try:
        lesson_service.delete_lesson(db, lesson_id)
        return {"message": "Lesson deleted successfully"}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"delete_lesson: Failure - {e}")
        raise ServerError()
