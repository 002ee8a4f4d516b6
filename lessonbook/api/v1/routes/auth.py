from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from lessonbook.api.v1.schemas import CamelModel
from lessonbook.api.v1.serializers import public_user
from lessonbook.core.database import get_db
from lessonbook.core.exceptions import ServerError
from lessonbook.core.middleware import get_current_user
from lessonbook.models.user import User
from lessonbook.services.user_service import UserService
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


def get_user_service() -> UserService:
    """Dependency to get user service instance"""
    return UserService()


class RegisterRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: Session = Depends(get_db),
    user_service: UserService = Depends(get_user_service)
):
    """
    Register a new student account.
    Public endpoint - returns a session token and the public user.
    """
    logger.info("register: Entry")

    try:
        token, user = user_service.register(db, request.name, request.email, request.password)
        return {"token": token, "user": public_user(user)}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"register: Failure - {e}")
        raise ServerError()


@router.post("/login")
async def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
    user_service: UserService = Depends(get_user_service)
):
    """Exchange email and password for a session token."""
    logger.info("login: Entry")

    try:
        token, user = user_service.login(db, request.email, request.password)
        return {"token": token, "user": public_user(user)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"login: Failure - {e}")
        raise ServerError()


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    """Public projection of the caller's own record."""
    return {"user": public_user(current_user)}
