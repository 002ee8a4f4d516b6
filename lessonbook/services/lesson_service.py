import logging
import uuid
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lessonbook.core.exceptions import LessonInUse, NotFound
from lessonbook.models.lesson import Lesson
from lessonbook.services.validation import validate_lesson

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "price", "level", "category", "duration")


class LessonService:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def list_lessons(
        self,
        db: Session,
        level: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Lesson]:
        """Equality filters on level/category, case-insensitive substring search, newest first"""
        self.logger.info(f"list_lessons: Entry - level: {level}, category: {category}, search: {search}")

        query = db.query(Lesson)
        if level:
            query = query.filter(Lesson.level == level)
        if category:
            query = query.filter(Lesson.category == category)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Lesson.title.ilike(pattern), Lesson.description.ilike(pattern)))

        lessons = query.order_by(Lesson.created_at.desc()).all()
        self.logger.info(f"list_lessons: Success - {len(lessons)} lessons")
        return lessons

    def get_lesson(self, db: Session, lesson_id: str) -> Lesson:
        lesson = db.query(Lesson).filter(Lesson.id == lesson_id).first()
        if not lesson:
            self.logger.warning(f"get_lesson: Not found - {lesson_id}")
            raise NotFound("Lesson not found")
        return lesson

    def create_lesson(self, db: Session, **fields) -> Lesson:
        self.logger.info(f"create_lesson: Entry - title: {fields.get('title')}")

        values = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None}
        for key in ("title", "description"):
            if isinstance(values.get(key), str):
                values[key] = values[key].strip()

        lesson = Lesson(id=str(uuid.uuid4()), **values)
        validate_lesson(lesson).raise_for_errors()

        db.add(lesson)
        db.commit()
        db.refresh(lesson)

        self.logger.info(f"create_lesson: Success - lesson: {lesson.id}")
        return lesson

    def update_lesson(self, db: Session, lesson_id: str, fields: dict) -> Lesson:
        self.logger.info(f"update_lesson: Entry - lesson: {lesson_id}, fields: {sorted(fields)}")

        lesson = self.get_lesson(db, lesson_id)
        # null means "leave unchanged", as on create
        for key, value in fields.items():
            if key in UPDATABLE_FIELDS and value is not None:
                setattr(lesson, key, value)

        result = validate_lesson(lesson)
        if not result.ok:
            db.rollback()
            result.raise_for_errors()

        db.commit()
        db.refresh(lesson)

        self.logger.info(f"update_lesson: Success - lesson: {lesson_id}")
        return lesson

    def delete_lesson(self, db: Session, lesson_id: str):
        self.logger.info(f"delete_lesson: Entry - lesson: {lesson_id}")

        lesson = self.get_lesson(db, lesson_id)
        try:
            db.delete(lesson)
            db.commit()
        except IntegrityError:
            db.rollback()
            self.logger.warning(f"delete_lesson: Lesson still referenced - {lesson_id}")
            raise LessonInUse()

        self.logger.info(f"delete_lesson: Success - lesson: {lesson_id}")
