"""Virtual try-on endpoints (face scan, hairstyle generation, mask preview)"""

import time
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import GenerateRequest, MaskResponse, ScanResponse, TryOnResponse
from config.settings import settings
from core.auth import get_current_user
from core.exceptions import (
    GlamMefyException,
    InvalidFileFormatException,
    InvalidImageException,
    CollageException,
    HairTemplateNotFoundException,
    ScanNotFoundException,
    CircuitBreakerOpenException,
    ServiceNotConfiguredException,
    MaskingAPIException,
    InpaintingAPIException,
    SegmentationAPIException,
)
from core.logging import logger, log_structured
from database.models import User
from services.collage_service import decode_image, to_data_url
from services.tryon_pipeline import get_tryon_pipeline


router = APIRouter()

# Rate limiter - every call costs remote GPU time
limiter = Limiter(key_func=get_remote_address)

ALLOWED_EXTENSIONS = ['jpg', 'jpeg', 'png', 'webp']
MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB

# (status code, error code) per domain exception, most specific first
ERROR_MAP = [
    (InvalidFileFormatException, 400, "invalid_file_format"),
    (InvalidImageException, 400, "invalid_image"),
    (CollageException, 400, "invalid_collage"),
    (HairTemplateNotFoundException, 404, "template_not_found"),
    (ScanNotFoundException, 404, "scan_not_found"),
    (CircuitBreakerOpenException, 503, "service_unavailable"),
    (ServiceNotConfiguredException, 503, "service_not_configured"),
    (MaskingAPIException, 502, "masking_failed"),
    (InpaintingAPIException, 502, "inpainting_failed"),
    (SegmentationAPIException, 502, "segmentation_failed"),
]


# ========== Helper Functions ==========
def error_response(exc: GlamMefyException) -> JSONResponse:
    """Translate a domain exception into the standard error body"""
    for exc_type, status_code, error in ERROR_MAP:
        if isinstance(exc, exc_type):
            break
    else:
        status_code, error = 500, "internal_error"

    if status_code >= 500:
        logger.error(f"❌ Try-on failed ({error}): {exc.message}")
    else:
        logger.warning(f"⚠️ Try-on rejected ({error}): {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "message": exc.message
        }
    )


async def read_upload(file: UploadFile) -> bytes:
    """
    Validate and read one uploaded image

    Raises:
        InvalidFileFormatException: missing name or unsupported extension
        HTTPException: 400 if the file exceeds 10MB or is empty
    """
    if not file.filename:
        raise InvalidFileFormatException("Uploaded file has no filename")

    file_ext = file.filename.lower().split('.')[-1]
    if file_ext not in ALLOWED_EXTENSIONS:
        raise InvalidFileFormatException()

    image_data = await file.read()

    if len(image_data) > MAX_IMAGE_SIZE:
        raise HTTPException(status_code=400, detail="File size exceeds 10MB")
    if not image_data:
        raise HTTPException(status_code=400, detail=f"{file.filename} is empty")

    return image_data


async def require_tryon_access(current_user: User = Depends(get_current_user)) -> User:
    """Logged-in user, and premium when PREMIUM_REQUIRED_FOR_TRYON is on"""
    if settings.PREMIUM_REQUIRED_FOR_TRYON and not current_user.is_premium:
        raise HTTPException(status_code=403, detail="Premium subscription required for virtual try-on")
    return current_user


# ========== API Endpoints ==========
@router.post("/scan", response_model=ScanResponse)
@limiter.limit("5/minute")
async def scan_face(
    request: Request,
    left: UploadFile = File(..., description="Left profile view"),
    front: UploadFile = File(..., description="Front view"),
    right: UploadFile = File(..., description="Right profile view"),
    current_user: User = Depends(require_tryon_access)
):
    """
    Mask the hair of the three face views and build both collages

    Returns:
        {
            "success": true,
            "scan_id": "...",          # pass to /generate
            "stored": true,            # false when Redis is unavailable
            "views": {"left": "data:image/png;base64,...", ...},
            "masks": {"left": "data:image/png;base64,...", ...},
            "original_collage": "data:image/png;base64,...",
            "mask_collage": "data:image/png;base64,...",
            "processing_time": 7.3
        }
    """
    try:
        views: List[bytes] = [await read_upload(f) for f in (left, front, right)]
        logger.info(f"📸 Face scan started by {current_user.username}")

        result = await run_in_threadpool(get_tryon_pipeline().scan, views)
        logger.info(f"✅ Face scan complete: {result['scan_id']} ({result['processing_time']}s)")
        return {"success": True, **result}

    except GlamMefyException as e:
        log_structured("scan_failed", {"user_id": current_user.id, "error": type(e).__name__})
        return error_response(e)


@router.post("/generate", response_model=TryOnResponse)
@limiter.limit("5/minute")
async def generate_hairstyle(
    request: Request,
    payload: GenerateRequest,
    current_user: User = Depends(require_tryon_access)
):
    """
    Paint a style template onto a previous scan

    Send `scan_id` from /scan, or both `original_collage` and `mask_collage`
    when the scan could not be stored.
    """
    try:
        logger.info(f"💇 Generate request: template={payload.template_id}, scan={payload.scan_id}")

        result = await run_in_threadpool(
            get_tryon_pipeline().generate,
            payload.template_id,
            payload.scan_id,
            payload.original_collage,
            payload.mask_collage
        )
        logger.info(f"✅ Hairstyle generated ({result['processing_time']}s)")
        return {"success": True, "scan_id": payload.scan_id, **result}

    except GlamMefyException as e:
        log_structured("tryon_failed", {
            "user_id": current_user.id,
            "template_id": payload.template_id,
            "error": type(e).__name__
        })
        return error_response(e)


@router.post("/", response_model=TryOnResponse)
@limiter.limit("5/minute")
async def try_on(
    request: Request,
    template_id: str = Form(..., description="Hair template id"),
    left: UploadFile = File(...),
    front: UploadFile = File(...),
    right: UploadFile = File(...),
    current_user: User = Depends(require_tryon_access)
):
    """Scan and generate in a single request"""
    try:
        views = [await read_upload(f) for f in (left, front, right)]
        logger.info(f"🎨 One-shot try-on: template={template_id}")

        result = await run_in_threadpool(get_tryon_pipeline().try_on, views, template_id)
        return {"success": True, **result}

    except GlamMefyException as e:
        log_structured("tryon_failed", {
            "user_id": current_user.id,
            "template_id": template_id,
            "error": type(e).__name__
        })
        return error_response(e)


@router.post("/mask", response_model=MaskResponse)
@limiter.limit("10/minute")
async def mask_preview(
    request: Request,
    file: UploadFile = File(..., description="Face image"),
    prompt: Optional[str] = Form(None, description="Override the masking prompt"),
    current_user: User = Depends(require_tryon_access)
):
    """Mask a single image so the client can inspect what will be repainted"""
    start_time = time.time()

    try:
        image = decode_image(await read_upload(file)).convert("RGB")
        pipeline = get_tryon_pipeline()

        mask = await run_in_threadpool(pipeline.mask_view, image, prompt)

        return {
            "success": True,
            "provider": pipeline.masking_provider,
            "mask_data_url": to_data_url(mask),
            "processing_time": round(time.time() - start_time, 2)
        }

    except GlamMefyException as e:
        return error_response(e)
