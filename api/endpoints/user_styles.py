"""Saved looks of the logged-in user"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from api.dependencies import UserStyleCreate, UserStyleResponse
from core.auth import get_current_user
from core.exceptions import DatabaseException
from database.connection import get_db
from database.models import User
from database.repository import HairstyleRepository, UserStyleRepository


router = APIRouter()


def _get_owned_style(style_id: str, user: User, db: Session):
    """Styles of other users are reported as missing, not forbidden"""
    style = UserStyleRepository(db).get_for_user(style_id, user.id)
    if not style:
        raise HTTPException(status_code=404, detail="Style not found")
    return style


@router.post("/", response_model=UserStyleResponse, status_code=status.HTTP_201_CREATED)
async def save_style(
    payload: UserStyleCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if not HairstyleRepository(db).get(payload.hairstyle_id):
        raise HTTPException(status_code=404, detail="Hairstyle not found")

    try:
        style = UserStyleRepository(db).create(
            user_id=current_user.id,
            hairstyle_id=payload.hairstyle_id,
            color_value=payload.color_value,
            is_favorite=payload.is_favorite
        )
    except DatabaseException as e:
        raise HTTPException(status_code=500, detail=e.message)

    return style.to_dict()


@router.get("/", response_model=List[UserStyleResponse])
async def list_styles(
    favorites_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    styles = UserStyleRepository(db).list_for_user(current_user.id, favorites_only)
    return [s.to_dict() for s in styles]


@router.patch("/{style_id}/favorite", response_model=UserStyleResponse)
async def toggle_favorite(
    style_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    style = _get_owned_style(style_id, current_user, db)
    return UserStyleRepository(db).toggle_favorite(style).to_dict()


@router.delete("/{style_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_style(
    style_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    style = _get_owned_style(style_id, current_user, db)
    UserStyleRepository(db).delete(style)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
