"""Application settings and configuration management using Pydantic Settings"""

import logging
from typing import Any, List, Optional
from pydantic_settings import BaseSettings
from config.secrets import get_secret_or_env, is_aws_environment

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    # API Keys (will be overridden by __init__ if in AWS)
    FAL_KEY: str = ""
    AILAB_API_KEY: Optional[str] = None
    ADMIN_API_KEY: Optional[str] = None  # For admin endpoints authentication

    # Database Configuration
    DATABASE_URL: Optional[str] = None
    SEED_CATALOG: bool = True

    # Redis Configuration
    REDIS_URL: Optional[str] = None
    CACHE_TTL: int = 86400  # 24 hours in seconds
    SCAN_TTL: int = 3600  # scans are kept for one hour

    # AWS
    AWS_REGION: str = "us-east-1"

    # Security Settings
    ALLOWED_ORIGINS: str = "http://localhost:5173"  # Comma-separated list
    JWT_SECRET: str = "your-secret-key"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 7
    PREMIUM_REQUIRED_FOR_TRYON: bool = False

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    # Masking Configuration
    MASKING_PROVIDER: str = "fal"  # fal or ailab
    MASKING_MODEL: str = "fal-ai/evf-sam"
    MASKING_PROMPT: str = (
        "Mask only the scalp hair in the full-face crop, excluding all facial hair "
        "(beard, eyebrows). Focus on the hair on top of the head, sideburns, and back "
        "of the head. Do not include any facial hair, eyebrows, or beard."
    )
    COLLAGE_MASKING_PROMPT: str = "mask the head hair region of all the images in uploaded image"
    MASKING_POLL_INTERVAL: float = 1.0

    # Inpainting Configuration
    INPAINTING_MODEL: str = "fal-ai/flux-general/inpainting"
    INPAINTING_POLL_INTERVAL: float = 2.0

    # AILabAPI hair segmentation
    AILAB_HAIR_SEGMENTATION_URL: str = "https://www.ailabapi.com/api/cutout/portrait/hair-segmentation"

    # Collage Configuration
    COLLAGE_TILE_SIZE: int = 300
    RESULT_JPEG_QUALITY: int = 90

    # Outbound HTTP
    HTTP_TIMEOUT: int = 60

    # Logging Configuration
    LOG_LEVEL: str = "INFO"

    # Environment Settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Application Info
    APP_TITLE: str = "GlamMefy API"
    APP_DESCRIPTION: str = "AI hairstyle try-on service (hair masking + FLUX inpainting)"
    APP_VERSION: str = "1.2.0"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def __init__(self, **kwargs: Any) -> None:
        """
        Initialize settings with AWS Secrets Manager integration

        Priority:
        1. AWS Secrets Manager (if in AWS environment)
        2. Environment variables (fallback)
        3. .env file (fallback)
        """
        super().__init__(**kwargs)

        if is_aws_environment():
            logger.info("🔐 AWS environment detected - loading secrets from Secrets Manager")

            secret_fields = [
                ("glammefy-fal-key", "FAL_KEY", True),
                ("glammefy-ailab-api-key", "AILAB_API_KEY", False),
                ("glammefy-jwt-secret", "JWT_SECRET", False),
                ("glammefy-admin-api-key", "ADMIN_API_KEY", False),
                ("glammefy-database-url", "DATABASE_URL", False),
            ]

            for secret_name, field_name, required in secret_fields:
                try:
                    value = get_secret_or_env(
                        secret_name=secret_name,
                        env_var_name=field_name,
                        region_name=self.AWS_REGION,
                        required=required
                    )
                    if value:
                        setattr(self, field_name, value)
                        logger.info(f"✅ {field_name} loaded from Secrets Manager")
                except Exception as e:
                    logger.error(f"❌ Failed to load {field_name}: {str(e)}")

        else:
            logger.info("💻 Local/Dev environment detected - using environment variables/.env file")

        # Validate required secrets
        if not self.FAL_KEY:
            raise ValueError(
                "FAL_KEY is required but not found in Secrets Manager or environment variables"
            )


# Singleton instance
settings = Settings()
