"""
Admin router

Circuit breaker status/reset, usage statistics and premium management.
All endpoints require the X-API-Key header.
"""

from typing import Dict, Any
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session

from api.dependencies import PremiumUpdateRequest
from core.auth import verify_admin_api_key
from core.cache import is_cache_available
from database.connection import get_db
from database.models import User, UserStyle
from database.repository import HairstyleRepository, UserRepository, UserStyleRepository
from services.circuit_breaker import get_circuit_breaker_status, reset_circuit_breakers
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/admin/circuit-breaker-status")
async def get_circuit_status(api_key: str = Depends(verify_admin_api_key)):
    """
    Circuit breaker status per remote AI service

    Returns:
        - fal_masking / fal_inpainting / ailab_segmentation:
            - state: closed / open / half-open
            - fail_counter: current consecutive failures
            - fail_max: failures before the circuit opens
            - reset_timeout: seconds before a half-open retry
    """
    status = get_circuit_breaker_status()

    logger.info(f"⚡ Circuit breaker status requested: {status}")

    return {
        "success": True,
        **status
    }


@router.post("/admin/circuit-breaker-reset")
async def reset_circuit(api_key: str = Depends(verify_admin_api_key)):
    """Force every circuit breaker back to closed"""
    reset_circuit_breakers()

    logger.warning("⚠️ [ADMIN] Circuit breakers reset manually")

    return {
        "success": True,
        "message": "All circuit breakers have been reset"
    }


@router.get("/admin/stats")
async def get_stats(
    api_key: str = Depends(verify_admin_api_key),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Usage statistics

    Returns:
        - total_users / premium_users
        - total_hairstyles / total_saved_styles
        - favorite_counts: favorites per catalog hairstyle name
        - cache_available: whether Redis is connected
    """
    hairstyles = {h.id: h.name for h in HairstyleRepository(db).list()}
    favorites = UserStyleRepository(db).favorite_counts()

    return {
        "success": True,
        "total_users": db.query(User).count(),
        "premium_users": db.query(User).filter(User.is_premium.is_(True)).count(),
        "total_hairstyles": len(hairstyles),
        "total_saved_styles": db.query(UserStyle).count(),
        "favorite_counts": {
            hairstyles.get(hairstyle_id, hairstyle_id): count
            for hairstyle_id, count in favorites.items()
        },
        "cache_available": is_cache_available()
    }


@router.patch("/admin/users/{user_id}/premium")
async def set_premium(
    user_id: str,
    payload: PremiumUpdateRequest,
    api_key: str = Depends(verify_admin_api_key),
    db: Session = Depends(get_db)
):
    """Grant or revoke premium for a user"""
    user = UserRepository(db).set_premium(user_id, payload.is_premium)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(f"[ADMIN] Premium {'granted to' if payload.is_premium else 'revoked from'} {user.username}")

    return {
        "success": True,
        "user": user.to_dict()
    }
