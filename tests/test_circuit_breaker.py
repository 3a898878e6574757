"""Tests for Circuit Breaker implementation"""

import pytest

from core.exceptions import CircuitBreakerOpenException
from services.circuit_breaker import (
    ALL_BREAKERS,
    fal_masking_breaker,
    get_circuit_breaker_status,
    reset_circuit_breakers,
    with_circuit_breaker
)


class FlakyAPIError(Exception):
    pass


@with_circuit_breaker(fal_masking_breaker)
def call_remote(should_fail: bool = False):
    if should_fail:
        raise FlakyAPIError("remote failed")
    return "ok"


class TestCircuitBreaker:
    """Test suite for Circuit Breaker"""

    def test_circuit_breaker_starts_closed(self):
        assert fal_masking_breaker.current_state == "closed"
        assert fal_masking_breaker.fail_counter == 0

    def test_success_keeps_closed(self):
        assert call_remote() == "ok"
        assert fal_masking_breaker.current_state == "closed"
        assert fal_masking_breaker.fail_counter == 0

    def test_failures_are_counted_and_reraised(self):
        with pytest.raises(FlakyAPIError):
            call_remote(should_fail=True)

        assert fal_masking_breaker.fail_counter == 1

    def test_circuit_opens_after_max_failures(self):
        """After fail_max failures calls are rejected without reaching the remote"""
        for _ in range(fal_masking_breaker.fail_max - 1):
            with pytest.raises(FlakyAPIError):
                call_remote(should_fail=True)

        # the call that trips the breaker is reported as open
        with pytest.raises(CircuitBreakerOpenException):
            call_remote(should_fail=True)

        assert fal_masking_breaker.current_state == "open"

        with pytest.raises(CircuitBreakerOpenException) as exc_info:
            call_remote()
        assert exc_info.value.service_name == "FalMasking"

    def test_reset_closes_all_breakers(self):
        fal_masking_breaker.open()
        assert fal_masking_breaker.current_state == "open"

        reset_circuit_breakers()

        assert all(b.current_state == "closed" for b in ALL_BREAKERS.values())
        assert call_remote() == "ok"


class TestCircuitBreakerStatus:
    """Test status reporting"""

    def test_status_lists_every_remote_service(self):
        status = get_circuit_breaker_status()

        assert set(status) == {"fal_masking", "fal_inpainting", "ailab_segmentation"}
        for entry in status.values():
            assert entry["state"] == "closed"
            assert entry["is_closed"] is True
            assert entry["fail_max"] == 5
            assert entry["reset_timeout"] == 60

    def test_status_reports_open_breaker(self):
        fal_masking_breaker.open()

        status = get_circuit_breaker_status()

        assert status["fal_masking"]["is_open"] is True
        assert status["fal_inpainting"]["is_open"] is False
