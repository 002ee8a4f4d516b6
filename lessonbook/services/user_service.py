import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lessonbook.core.exceptions import InvalidCredentials, ValidationError
from lessonbook.core.security import create_access_token, hash_password, verify_password
from lessonbook.models.user import User, UserRole
from lessonbook.services.validation import validate_user

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class UserService:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == normalize_email(email)).first()

    def register(self, db: Session, name: str, email: str, password: str) -> Tuple[str, User]:
        """Create a student account and return a fresh token with it"""
        self.logger.info("register: Entry")

        if not name or not email or not password:
            raise ValidationError("Please provide all required fields")

        if self.get_by_email(db, email):
            self.logger.warning("register: Email already registered")
            raise ValidationError("User already exists")

        user = User(
            id=str(uuid.uuid4()),
            name=name.strip(),
            email=normalize_email(email),
            password=hash_password(password),
            role=UserRole.STUDENT,
        )
        validate_user(user, plain_password=password).raise_for_errors()

        try:
            db.add(user)
            db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration of the same email
            db.rollback()
            raise ValidationError("User already exists")
        db.refresh(user)

        self.logger.info(f"register: Success - user: {user.id}")
        return create_access_token(user.id), user

    def login(self, db: Session, email: str, password: str) -> Tuple[str, User]:
        """Same failure for unknown email and wrong password"""
        self.logger.info("login: Entry")

        user = self.get_by_email(db, email) if email else None
        if not user or not verify_password(password, user.password):
            self.logger.warning("login: Invalid credentials")
            raise InvalidCredentials()

        self.logger.info(f"login: Success - user: {user.id}")
        return create_access_token(user.id), user

    def set_role(self, db: Session, email: str, role: UserRole) -> User:
        """Used by the admin CLI; registration only ever creates students."""
        self.logger.info(f"set_role: Entry - role: {role.value}")

        user = self.get_by_email(db, email)
        if not user:
            raise ValueError(f"User not found: {email}")

        user.role = role
        validate_user(user).raise_for_errors()
        db.commit()
        db.refresh(user)

        self.logger.info(f"set_role: Success - user: {user.id}, role: {role.value}")
        return user
