"""
Enhanced Health Check Service

Provides comprehensive health checks for all critical services:
- Database connectivity
- Redis connectivity
- fal.ai reachability (deep check only)
- System metrics (CPU, memory)
- Circuit Breaker status
"""

import logging
import time
from typing import Dict, Any, Optional
from datetime import datetime

import psutil
import redis
import requests
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

FAL_HEALTH_URL = "https://queue.fal.run"


class HealthCheckService:
    """Comprehensive health check service"""

    def __init__(self):
        """Initialize health check service"""
        self.last_check_time: Optional[float] = None

    async def check_database(self) -> Dict[str, Any]:
        """
        Check database connectivity with SELECT 1

        Returns:
            Dict with status, latency, and error details
        """
        from database import connection

        if connection.engine is None:
            return {
                "status": "unhealthy",
                "message": "Database not initialized",
                "latency_ms": 0
            }

        try:
            start_time = time.time()
            connection.ping_database()
            latency_ms = round((time.time() - start_time) * 1000, 2)

            return {
                "status": "healthy",
                "dialect": connection.engine.dialect.name,
                "latency_ms": latency_ms
            }

        except SQLAlchemyError as e:
            logger.error(f"❌ Database health check failed: {str(e)}")

            return {
                "status": "unhealthy",
                "error": type(e).__name__,
                "message": str(e)[:100],
                "latency_ms": 0
            }

    async def check_redis(self) -> Dict[str, Any]:
        """Check Redis with PING (Redis is optional, so missing is 'skipped')"""
        from core import cache

        if cache.redis_client is None:
            return {
                "status": "skipped",
                "message": "Redis not configured - scans are not stored",
                "latency_ms": 0
            }

        try:
            start_time = time.time()
            cache.redis_client.ping()
            latency_ms = round((time.time() - start_time) * 1000, 2)

            return {"status": "healthy", "latency_ms": latency_ms}

        except redis.RedisError as e:
            logger.error(f"❌ Redis health check failed: {str(e)}")

            return {
                "status": "unhealthy",
                "error": type(e).__name__,
                "message": str(e)[:100],
                "latency_ms": 0
            }

    async def check_fal_api(self) -> Dict[str, Any]:
        """
        Check that the fal.ai queue endpoint is reachable

        Any HTTP answer counts as reachable; no model is invoked.
        """
        from config.settings import settings

        try:
            start_time = time.time()
            response = requests.get(FAL_HEALTH_URL, timeout=5)
            latency_ms = round((time.time() - start_time) * 1000, 2)

            logger.info(f"✅ fal.ai health check passed ({latency_ms}ms)")

            return {
                "status": "healthy",
                "http_status": response.status_code,
                "masking_model": settings.MASKING_MODEL,
                "inpainting_model": settings.INPAINTING_MODEL,
                "latency_ms": latency_ms
            }

        except requests.RequestException as e:
            logger.error(f"❌ fal.ai health check failed: {str(e)}")

            return {
                "status": "unhealthy",
                "error": type(e).__name__,
                "message": str(e)[:100],
                "latency_ms": 0
            }

    def get_system_metrics(self) -> Dict[str, Any]:
        """
        Get system resource usage metrics

        Returns:
            Dict with CPU, memory, and disk usage
        """
        cpu_percent = psutil.cpu_percent(interval=0.1)
        memory = psutil.virtual_memory()

        try:
            disk = psutil.disk_usage('/')
            disk_info = {
                "total_gb": round(disk.total / (1024 ** 3), 2),
                "used_gb": round(disk.used / (1024 ** 3), 2),
                "free_gb": round(disk.free / (1024 ** 3), 2),
                "percent": disk.percent
            }
        except (OSError, PermissionError) as e:
            logger.warning(f"⚠️ Disk usage unavailable: {str(e)}")
            disk_info = {"status": "unavailable", "reason": str(e)}

        return {
            "cpu": {
                "percent": cpu_percent,
                "count": psutil.cpu_count()
            },
            "memory": {
                "total_mb": round(memory.total / (1024 ** 2), 2),
                "available_mb": round(memory.available / (1024 ** 2), 2),
                "used_mb": round(memory.used / (1024 ** 2), 2),
                "percent": memory.percent
            },
            "disk": disk_info
        }

    def get_circuit_breaker_status(self) -> Dict[str, Any]:
        """Circuit breaker state per remote service; any open breaker degrades"""
        from services.circuit_breaker import get_circuit_breaker_status

        breakers = get_circuit_breaker_status()
        any_open = any(b["is_open"] for b in breakers.values())

        return {
            "status": "degraded" if any_open else "healthy",
            "breakers": breakers
        }

    async def comprehensive_health_check(
        self,
        include_expensive_checks: bool = False
    ) -> Dict[str, Any]:
        """
        Run comprehensive health check

        Args:
            include_expensive_checks: If True, also pings fal.ai over the network

        Returns:
            Dict with all health check results
        """
        start_time = time.time()

        health_result = {
            "status": "healthy",
            "timestamp": datetime.utcnow().isoformat(),
            "checks": {}
        }

        # 1. System metrics (fast, always run)
        health_result["checks"]["system"] = self.get_system_metrics()

        # 2. Circuit Breaker status (fast, always run)
        breaker_result = self.get_circuit_breaker_status()
        health_result["checks"]["circuit_breaker"] = breaker_result
        if breaker_result["status"] == "degraded":
            health_result["status"] = "degraded"

        # 3. Database + Redis (moderate cost, always run)
        database_result = await self.check_database()
        health_result["checks"]["database"] = database_result
        if database_result["status"] == "unhealthy":
            health_result["status"] = "degraded"

        redis_result = await self.check_redis()
        health_result["checks"]["redis"] = redis_result
        if redis_result["status"] == "unhealthy":
            health_result["status"] = "degraded"

        # 4. fal.ai reachability (network round trip, optional)
        if include_expensive_checks:
            fal_result = await self.check_fal_api()
            health_result["checks"]["fal_api"] = fal_result

            if fal_result["status"] == "unhealthy":
                health_result["status"] = "degraded"
        else:
            health_result["checks"]["fal_api"] = {
                "status": "skipped",
                "message": "Use ?deep=true for full check"
            }

        self.last_check_time = time.time()
        health_result["check_duration_ms"] = round((self.last_check_time - start_time) * 1000, 2)

        return health_result


# Singleton instance
_health_check_service = None


def get_health_check_service() -> HealthCheckService:
    """Get singleton health check service instance"""
    global _health_check_service

    if _health_check_service is None:
        _health_check_service = HealthCheckService()

    return _health_check_service
