"""FastAPI dependencies and Pydantic models"""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


# ========== Enums ==========
class Difficulty(str, Enum):
    """How hard a catalog hairstyle is to achieve"""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# ========== Auth Models ==========
class RegisterRequest(BaseModel):
    """Account registration request"""
    username: str = Field(..., min_length=3, max_length=64, description="Unique username")
    password: str = Field(..., min_length=6, max_length=128, description="Plaintext password")


class LoginRequest(BaseModel):
    """Login request"""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Public view of a user (never includes the password)"""
    id: str
    username: str
    is_premium: bool = False
    created_at: Optional[str] = None


class AuthResponse(BaseModel):
    """Token issued on register/login"""
    token: str
    user: UserResponse


# ========== Hairstyle Models ==========
class HairstyleCreate(BaseModel):
    """Catalog entry creation request (admin)"""
    name: str = Field(..., min_length=1, max_length=120)
    image: str = Field(..., min_length=1, description="Image URL")
    categories: List[str] = Field(..., min_length=1, description="e.g. ['short', 'classic']")
    difficulty: Difficulty
    trending: bool = False


class HairstyleResponse(BaseModel):
    id: str
    name: str
    image: str
    categories: List[str]
    difficulty: str
    trending: bool = False
    is_favorite: Optional[bool] = None  # only set for signed-in viewers
    created_at: Optional[str] = None


# ========== User Style Models ==========
class UserStyleCreate(BaseModel):
    """Save a look to the user's collection"""
    hairstyle_id: str = Field(..., description="Catalog hairstyle id")
    color_value: Optional[str] = Field(None, max_length=32, description="Hex color, e.g. #8B4513")
    is_favorite: bool = False


class UserStyleResponse(BaseModel):
    id: str
    user_id: str
    hairstyle_id: str
    color_value: Optional[str] = None
    is_favorite: bool = False
    created_at: Optional[str] = None
    hairstyle: Optional[HairstyleResponse] = None


# ========== Try-on Models ==========
class GenerateRequest(BaseModel):
    """
    Hairstyle generation request

    Either `scan_id` (from /api/tryon/scan) or both collages must be given.
    """
    template_id: str = Field(..., description="Hair template id (curly, long-marron, streak)")
    scan_id: Optional[str] = Field(None, description="Scan id returned by /scan")
    original_collage: Optional[str] = Field(None, description="Original collage (URL or data URL)")
    mask_collage: Optional[str] = Field(None, description="Mask collage (URL or data URL)")


class ScanResponse(BaseModel):
    success: bool = True
    scan_id: str
    stored: bool
    views: Dict[str, str]
    masks: Dict[str, str]
    original_collage: str
    mask_collage: str
    processing_time: float


class TryOnResponse(BaseModel):
    success: bool = True
    template_id: str
    scan_id: Optional[str] = None
    result_url: str
    result_collage: str
    views: Dict[str, str]
    seed: Optional[int] = None
    has_nsfw_concepts: List[bool] = []
    processing_time: float


class MaskResponse(BaseModel):
    success: bool = True
    provider: str
    mask_data_url: str
    processing_time: float


# ========== Admin Models ==========
class PremiumUpdateRequest(BaseModel):
    is_premium: bool = Field(..., description="Grant or revoke premium")
