"""Redis caching utilities (mask results and pending scans)"""

import json
import hashlib
from typing import Optional, Dict, Any
import redis

from config.settings import settings
from core.logging import logger, log_structured


# Global Redis client
redis_client: Optional[redis.Redis] = None


def init_redis() -> bool:
    """
    Initialize Redis connection

    Returns:
        bool: True if successful, False otherwise
    """
    global redis_client

    if not settings.REDIS_URL:
        logger.warning("⚠️ REDIS_URL is not set - caching disabled")
        return False

    try:
        redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        redis_client.ping()
        logger.info("✅ Redis connected")
        return True

    except redis.RedisError as e:
        logger.error(f"❌ Redis connection failed: {str(e)}")
        redis_client = None
        return False


def calculate_image_hash(image_data: bytes, salt: str = "") -> str:
    """
    Calculate SHA256 hash of image data (used as caching key)

    Args:
        image_data: Image binary data
        salt: Extra text mixed into the hash (e.g. the masking prompt)

    Returns:
        SHA256 hash string
    """
    digest = hashlib.sha256(image_data)
    if salt:
        digest.update(salt.encode("utf-8"))
    return digest.hexdigest()


def get_cached_result(key: str) -> Optional[Dict[str, Any]]:
    """
    Retrieve a cached JSON value from Redis

    Args:
        key: Full cache key (e.g. "mask:<hash>", "scan:<id>")

    Returns:
        Cached dict or None if not found
    """
    if not redis_client:
        return None

    try:
        cached = redis_client.get(key)
        if cached:
            log_structured("cache_hit", {"key": key[:24]})
            return json.loads(cached)
        return None

    except (redis.RedisError, ValueError) as e:
        logger.error(f"Redis read error: {str(e)}")
        return None


def save_to_cache(key: str, result: Dict[str, Any], ttl: Optional[int] = None) -> bool:
    """
    Save a JSON value to Redis

    Args:
        key: Full cache key
        result: JSON-serialisable dict
        ttl: Expiry in seconds (defaults to CACHE_TTL)

    Returns:
        bool: True if successful, False otherwise
    """
    if not redis_client:
        return False

    try:
        redis_client.setex(
            key,
            ttl or settings.CACHE_TTL,
            json.dumps(result, ensure_ascii=False)
        )
        return True

    except (redis.RedisError, TypeError) as e:
        logger.error(f"Redis write error: {str(e)}")
        return False


def is_cache_available() -> bool:
    """Whether a Redis client is connected"""
    return redis_client is not None
