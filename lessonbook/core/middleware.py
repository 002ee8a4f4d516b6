from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from lessonbook.core.database import get_db
from lessonbook.core.exceptions import Forbidden, Unauthenticated
from lessonbook.core.security import decode_access_token
from lessonbook.models.user import User, UserRole
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency resolving the bearer token to a stored user.
    Protects routes that require authentication.
    """
    if credentials is None or not credentials.credentials:
        logger.warning("get_current_user: No token")
        raise Unauthenticated("Not authorized, no token")

    try:
        user_id = decode_access_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        logger.warning(f"get_current_user: Invalid token - {e}")
        raise Unauthenticated()

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"get_current_user: User no longer exists - {user_id}")
        raise Unauthenticated("Not authorized, user not found")

    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Dependency that only lets administrators through."""
    if current_user.role != UserRole.ADMIN:
        logger.warning(f"require_admin: Forbidden - user: {current_user.id}")
        raise Forbidden("Admin access required")
    return current_user
