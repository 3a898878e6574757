"""Account endpoints: register, login, current user"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from api.dependencies import RegisterRequest, LoginRequest, AuthResponse, UserResponse
from core.auth import create_access_token, get_current_user, hash_password, verify_password
from core.exceptions import DatabaseException, UserAlreadyExistsException
from core.logging import logger
from database.connection import get_db
from database.models import User
from database.repository import UserRepository


router = APIRouter()

# Rate limiter
limiter = Limiter(key_func=get_remote_address)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def register(
    request: Request,
    payload: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Create an account and return a token

    Returns:
        {"token": "<jwt>", "user": {"id", "username", "is_premium", "created_at"}}
    """
    repo = UserRepository(db)

    try:
        user = repo.create(payload.username, hash_password(payload.password))
    except UserAlreadyExistsException:
        logger.info(f"🚫 Registration rejected, username taken: {payload.username}")
        raise HTTPException(status_code=400, detail="User already exists")
    except DatabaseException as e:
        raise HTTPException(status_code=500, detail=e.message)

    logger.info(f"✅ User registered: {user.username}")
    return {"token": create_access_token(user.id), "user": user.to_dict()}


@router.post("/login", response_model=AuthResponse)
@limiter.limit("10/minute")
def login(
    request: Request,
    payload: LoginRequest,
    db: Session = Depends(get_db)
):
    """Exchange username + password for a token"""
    user = UserRepository(db).get_by_username(payload.username)

    if not user or not verify_password(payload.password, user.password):
        logger.info(f"🚫 Failed login for: {payload.username}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return {"token": create_access_token(user.id), "user": user.to_dict()}


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return current_user.to_dict()
