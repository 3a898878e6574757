"""
GlamMefy Backend - AI-powered virtual hairstyle try-on service
Version: 1.2.0
"""

import os
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from mangum import Mangum
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from config.settings import settings
from core.logging import logger
from core.monitoring import init_sentry

from routers.admin import router as admin_router
from api.endpoints.auth import router as auth_router
from api.endpoints.hairstyles import router as hairstyles_router
from api.endpoints.user_styles import router as user_styles_router
from api.endpoints.tryon import router as tryon_router

# Lambda 환경 감지
IS_LAMBDA = os.environ.get('AWS_LAMBDA_FUNCTION_NAME') is not None


# ========== Initialize Sentry (if configured) ==========
sentry_enabled = init_sentry()
if sentry_enabled:
    logger.info("✅ Sentry error tracking enabled")
else:
    logger.info("ℹ️  Sentry not configured - running without error tracking")


# ========== Rate Limiter Initialization ==========
limiter = Limiter(key_func=get_remote_address)

# ========== Service Startup Status Tracking ==========
startup_status = {
    "fal": False,
    "database": False,
    "redis": False,
    "ailab": False
}

# ========== FastAPI App Initialization ==========
app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION
)

# Attach limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ========== Trusted Host Middleware ==========
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=["*"]
)


# ========== CORS Middleware ==========
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========== Security Headers Middleware ==========
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """
    Add security headers to all responses

    img-src allows data: and https: because try-on results are returned as
    data URLs and fal.media links.
    """
    response = await call_next(request)

    response.headers["Content-Security-Policy"] = (
        "default-src 'self'; "
        "img-src 'self' data: https:; "
        "script-src 'self'; "
        "style-src 'self' 'unsafe-inline'; "
        "font-src 'self'; "
        "connect-src 'self'; "
        "frame-ancestors 'none';"
    )
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-XSS-Protection"] = "1; mode=block"

    # HSTS - only in HTTPS/production environments
    if request.url.scheme == "https" or settings.ENVIRONMENT == "production":
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )

    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    # camera=(self): the face scanner runs on the same origin
    response.headers["Permissions-Policy"] = (
        "geolocation=(), microphone=(), camera=(self), payment=(), usb=()"
    )

    if "Server" in response.headers:
        del response.headers["Server"]

    return response


# ========== File Size Limit Middleware ==========
# three views of up to 10MB each
MAX_REQUEST_SIZE = 3 * 10 * 1024 * 1024

@app.middleware("http")
async def limit_upload_size(request: Request, call_next):
    """Limit request body size to prevent DoS attacks"""
    if request.method == "POST":
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_SIZE:
            logger.warning(f"🚫 Request too large: {int(content_length)} bytes (max: {MAX_REQUEST_SIZE})")
            return JSONResponse(
                status_code=413,
                content={
                    "success": False,
                    "error": "payload_too_large",
                    "message": f"Request too large. Maximum size is {MAX_REQUEST_SIZE // (1024*1024)}MB"
                }
            )
    return await call_next(request)


# ========== Register Routers ==========
app.include_router(admin_router, prefix="/api", tags=["admin"])
app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
app.include_router(hairstyles_router, prefix="/api/hairstyles", tags=["hairstyles"])
app.include_router(user_styles_router, prefix="/api/user-styles", tags=["user-styles"])
app.include_router(tryon_router, prefix="/api/tryon", tags=["tryon"])


# ========== Startup Event ==========
@app.on_event("startup")
async def startup_event():
    """Initialize essential services on server startup"""
    logger.info("🚀 Starting GlamMefy backend...")

    # ========== 1. fal.ai credentials (required) ==========
    # Settings() already refuses to start without FAL_KEY
    startup_status["fal"] = bool(settings.FAL_KEY)
    startup_status["ailab"] = bool(settings.AILAB_API_KEY)

    if settings.MASKING_PROVIDER == "ailab" and not settings.AILAB_API_KEY:
        logger.warning("⚠️ MASKING_PROVIDER=ailab but AILAB_API_KEY is not set - masking will return 503")

    # ========== 2. Database & Cache ==========
    from database import init_database
    from core.cache import init_redis

    startup_status["database"] = init_database()
    startup_status["redis"] = init_redis()

    logger.info(f"✅ Startup complete: {startup_status}")


# ========== Root Endpoint ==========
@app.get("/")
async def root():
    """Root endpoint with service status"""
    return {
        "message": f"{settings.APP_TITLE} - v{settings.APP_VERSION}",
        "version": settings.APP_VERSION,
        "status": "running",
        "features": {
            "masking": settings.MASKING_PROVIDER,
            "masking_model": settings.MASKING_MODEL if settings.MASKING_PROVIDER == "fal" else "ailab",
            "inpainting_model": settings.INPAINTING_MODEL,
            "redis_cache": "enabled" if startup_status["redis"] else "disabled",
            "database": "enabled" if startup_status["database"] else "disabled",
            "premium_required": settings.PREMIUM_REQUIRED_FOR_TRYON
        }
    }


# ========== Health Check Endpoint ==========
@app.get("/api/health")
async def health_check(deep: bool = False):
    """
    Enhanced health check endpoint with actual service validation

    Query parameters:
    - deep: If true, also checks fal.ai reachability (slower)

    Returns:
    - status: "healthy" or "degraded"
    - startup: Services initialized during startup
    - checks: Real-time connectivity checks
    - system: CPU, memory, disk metrics
    - circuit_breaker: Circuit breaker states
    """
    from core.health_check import get_health_check_service

    required_services_ok = startup_status["fal"] and startup_status["database"]

    base_status = {
        "status": "healthy" if required_services_ok else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "startup": {
            "required_services": {
                "fal": startup_status["fal"],
                "database": startup_status["database"]
            },
            "optional_services": {
                "redis": startup_status["redis"],
                "ailab": startup_status["ailab"]
            }
        }
    }

    health_service = get_health_check_service()
    comprehensive_result = await health_service.comprehensive_health_check(
        include_expensive_checks=deep
    )

    base_status.update({
        "checks": comprehensive_result["checks"],
        "check_duration_ms": comprehensive_result["check_duration_ms"],
        "timestamp": comprehensive_result["timestamp"]
    })

    if comprehensive_result["status"] == "degraded":
        base_status["status"] = "degraded"

    return base_status


# ========== Lambda Handler ==========
# lifespan="on" runs the startup event on the first invocation
handler = Mangum(app, lifespan="on")
if IS_LAMBDA:
    logger.info("✅ Lambda handler initialized (lifespan=on)")


# ========== Main Entry Point ==========
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
