"""Authentication and authorization utilities"""

import base64
import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, Security, HTTPException, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from config.settings import settings
from database.connection import get_db
from database.models import User
from database.repository import UserRepository

# API Key Header (admin endpoints)
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Bearer token (user endpoints)
bearer_scheme = HTTPBearer(auto_error=False)


# ========== Passwords ==========
def _prehash(password: str) -> bytes:
    """
    SHA-256 the password before bcrypt

    bcrypt only accepts 72 bytes of input, which a 24-character Korean
    password already reaches. The base64 digest is always 44 bytes.
    """
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt"""
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash"""
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode("utf-8"))
    except ValueError:
        # malformed hash in the database
        return False


# ========== Tokens ==========
def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> str:
    """
    Issue a signed JWT for a user

    Args:
        user_id: User primary key, stored in the `id` claim
        expires_minutes: Lifetime override (defaults to JWT_EXPIRE_MINUTES)
    """
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES
    )
    payload = {"id": user_id, "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """Return the user id of a valid token, or None"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None
    return payload.get("id")


# ========== Dependencies ==========
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the authenticated user from the Authorization header

    Raises:
        HTTPException: 401 if the token is missing, invalid or the user is gone
    """
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token, authorization denied"
        )

    user_id = decode_access_token(credentials.credentials)
    user = UserRepository(db).get_by_id(user_id) if user_id else None

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is not valid"
        )

    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Like get_current_user, but anonymous requests resolve to None"""
    if not credentials or not credentials.credentials:
        return None

    user_id = decode_access_token(credentials.credentials)
    if not user_id:
        return None
    return UserRepository(db).get_by_id(user_id)


async def verify_admin_api_key(api_key: str = Security(api_key_header)) -> str:
    """
    Verify admin API key for protected endpoints

    Args:
        api_key: API key from X-API-Key header

    Returns:
        The validated API key

    Raises:
        HTTPException: 403 if API key is invalid or missing
    """
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API Key is required. Please provide X-API-Key header."
        )

    if not settings.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Admin API Key is not configured on server"
        )

    if api_key != settings.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API Key"
        )

    return api_key
