"""Circuit Breaker implementation for external AI API calls"""

from pybreaker import CircuitBreaker, CircuitBreakerError
from functools import wraps
from typing import Callable, Any, Dict
from core.logging import logger
from core.exceptions import CircuitBreakerOpenException


# ========== Circuit Breaker Configuration ==========

# - fail_max=5: Open after 5 consecutive failures
# - reset_timeout=60: Wait 60 seconds before trying again
fal_masking_breaker = CircuitBreaker(
    fail_max=5,
    reset_timeout=60,
    name='FalMasking'
)

fal_inpainting_breaker = CircuitBreaker(
    fail_max=5,
    reset_timeout=60,
    name='FalInpainting'
)

ailab_breaker = CircuitBreaker(
    fail_max=5,
    reset_timeout=60,
    name='AILabSegmentation'
)

ALL_BREAKERS: Dict[str, CircuitBreaker] = {
    "fal_masking": fal_masking_breaker,
    "fal_inpainting": fal_inpainting_breaker,
    "ailab_segmentation": ailab_breaker,
}


def with_circuit_breaker(breaker: CircuitBreaker):
    """
    Decorator to apply circuit breaker to a function

    Args:
        breaker: CircuitBreaker instance to use

    Example:
        @with_circuit_breaker(fal_masking_breaker)
        def call_api():
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            try:
                return breaker.call(func, *args, **kwargs)

            except CircuitBreakerError:
                logger.error(f"[CIRCUIT OPEN] {breaker.name}: rejecting call")
                raise CircuitBreakerOpenException(service_name=breaker.name)

        return wrapper
    return decorator


def get_circuit_breaker_status() -> dict:
    """
    Get current status of all circuit breakers

    Returns:
        Dictionary with circuit breaker statistics
    """
    status = {}
    for key, breaker in ALL_BREAKERS.items():
        state = str(breaker.current_state)
        status[key] = {
            "name": breaker.name,
            "state": state,
            "fail_counter": breaker.fail_counter,
            "fail_max": breaker.fail_max,
            "reset_timeout": breaker.reset_timeout,
            "is_open": state == "open",
            "is_closed": state == "closed",
            "is_half_open": state == "half-open"
        }
    return status


def reset_circuit_breakers():
    """Reset all circuit breakers (admin function)"""
    for breaker in ALL_BREAKERS.values():
        breaker.close()
    logger.info("[ADMIN] All circuit breakers have been reset")
