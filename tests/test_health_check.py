"""
Tests for enhanced health check service
"""

import pytest
from unittest.mock import Mock, patch

import redis
import requests

from core.health_check import HealthCheckService
from services.circuit_breaker import fal_masking_breaker


@pytest.fixture
def health_service():
    return HealthCheckService()


class TestHealthCheckService:

    @pytest.mark.asyncio
    async def test_database_not_initialized(self, health_service):
        with patch('database.connection.engine', None):
            result = await health_service.check_database()

        assert result["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_redis_skipped_without_client(self, health_service):
        with patch('core.cache.redis_client', None):
            result = await health_service.check_redis()

        assert result["status"] == "skipped"

    @pytest.mark.asyncio
    async def test_redis_healthy(self, health_service, mock_redis):
        result = await health_service.check_redis()

        assert result["status"] == "healthy"
        mock_redis.ping.assert_called_once()

    @pytest.mark.asyncio
    async def test_redis_unhealthy(self, health_service, mock_redis):
        mock_redis.ping.side_effect = redis.ConnectionError("refused")

        result = await health_service.check_redis()

        assert result["status"] == "unhealthy"
        assert result["error"] == "ConnectionError"

    @pytest.mark.asyncio
    async def test_fal_reachable(self, health_service):
        with patch('core.health_check.requests.get', return_value=Mock(status_code=404)):
            result = await health_service.check_fal_api()

        assert result["status"] == "healthy"
        assert result["http_status"] == 404

    @pytest.mark.asyncio
    async def test_fal_unreachable(self, health_service):
        with patch('core.health_check.requests.get', side_effect=requests.ConnectTimeout("timeout")):
            result = await health_service.check_fal_api()

        assert result["status"] == "unhealthy"

    def test_system_metrics(self, health_service):
        metrics = health_service.get_system_metrics()

        assert "percent" in metrics["cpu"]
        assert metrics["memory"]["total_mb"] > 0

    def test_open_breaker_degrades(self, health_service):
        fal_masking_breaker.open()

        result = health_service.get_circuit_breaker_status()

        assert result["status"] == "degraded"
        assert result["breakers"]["fal_masking"]["is_open"] is True

    @pytest.mark.asyncio
    async def test_comprehensive_skips_fal_by_default(self, health_service):
        with patch('core.health_check.requests.get') as mock_get:
            result = await health_service.comprehensive_health_check()

        mock_get.assert_not_called()
        assert result["checks"]["fal_api"]["status"] == "skipped"
        assert "check_duration_ms" in result

    @pytest.mark.asyncio
    async def test_comprehensive_deep_check(self, health_service):
        with patch('core.health_check.requests.get', side_effect=requests.ConnectionError("dns")):
            result = await health_service.comprehensive_health_check(include_expensive_checks=True)

        assert result["checks"]["fal_api"]["status"] == "unhealthy"
        assert result["status"] == "degraded"
