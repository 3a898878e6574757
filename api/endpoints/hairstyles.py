"""Hairstyle catalog and style template endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from api.dependencies import Difficulty, HairstyleCreate, HairstyleResponse
from core.auth import get_optional_user, verify_admin_api_key
from core.exceptions import DatabaseException, HairTemplateNotFoundException
from core.logging import logger
from database.connection import get_db
from database.models import User
from database.repository import HairstyleRepository, UserStyleRepository
from services.hair_templates import HairTemplate, get_template, list_templates


router = APIRouter()


# ========== Style Templates ==========
# Declared before /{hairstyle_id} so "templates" is not read as an id

@router.get("/templates", response_model=List[HairTemplate])
async def get_templates():
    """Hairstyles the try-on pipeline can generate"""
    return list_templates()


@router.get("/templates/{template_id}", response_model=HairTemplate)
async def get_template_by_id(template_id: str):
    try:
        return get_template(template_id)
    except HairTemplateNotFoundException as e:
        raise HTTPException(status_code=404, detail=e.message)


# ========== Catalog ==========

@router.get("/", response_model=List[HairstyleResponse])
async def list_hairstyles(
    category: Optional[str] = Query(None, description="e.g. short, medium, long, curly, trending"),
    difficulty: Optional[Difficulty] = Query(None),
    trending: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user)
):
    """
    List catalog hairstyles

    The style grid's "trending" tab is a category in the UI but a flag in
    the table, so category=trending is mapped onto the flag. Signed-in
    viewers also get is_favorite per hairstyle.
    """
    if category == "trending":
        category, trending = None, True

    hairstyles = HairstyleRepository(db).list(
        category=category,
        difficulty=difficulty.value if difficulty else None,
        trending=trending
    )
    if not viewer:
        return [h.to_dict() for h in hairstyles]

    favorites = {
        style.hairstyle_id
        for style in UserStyleRepository(db).list_for_user(viewer.id, favorites_only=True)
    }
    return [{**h.to_dict(), "is_favorite": h.id in favorites} for h in hairstyles]


@router.get("/{hairstyle_id}", response_model=HairstyleResponse)
async def get_hairstyle(hairstyle_id: str, db: Session = Depends(get_db)):
    hairstyle = HairstyleRepository(db).get(hairstyle_id)
    if not hairstyle:
        raise HTTPException(status_code=404, detail="Hairstyle not found")
    return hairstyle.to_dict()


@router.post("/", response_model=HairstyleResponse, status_code=status.HTTP_201_CREATED)
async def create_hairstyle(
    payload: HairstyleCreate,
    db: Session = Depends(get_db),
    api_key: str = Depends(verify_admin_api_key)
):
    """Add a catalog entry (admin only)"""
    data = payload.model_dump()
    data["difficulty"] = payload.difficulty.value

    try:
        hairstyle = HairstyleRepository(db).create(data)
    except DatabaseException as e:
        raise HTTPException(status_code=500, detail=e.message)

    logger.info(f"[ADMIN] Hairstyle created: {hairstyle.name}")
    return hairstyle.to_dict()
