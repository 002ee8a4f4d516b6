from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from lessonbook.core.config import settings
import logging

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    """Salted one-way hash for storage"""
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    if not password or not hashed_password:
        return False
    return pwd_context.verify(password, hashed_password)


def create_access_token(user_id: str, expires_delta: timedelta = None) -> str:
    """Sign a session token carrying the user id in ``sub``."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {"sub": user_id, "iat": now, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> str:
    """
    Verify signature and expiry, return the user id.
    Raises jwt.InvalidTokenError (or a subclass) on any problem.
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    user_id = payload.get("sub")
    if not user_id:
        raise jwt.InvalidTokenError("Token has no subject")
    return user_id
