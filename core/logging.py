"""Logging for GlamMefy Backend: one app logger plus JSON event lines"""

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Any, Iterator, Optional

from config.settings import settings

# Libraries that log every HTTP request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "botocore")


def setup_logging() -> logging.Logger:
    """Configure application logging with proper formatting"""
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    return logging.getLogger("glammefy")


logger = setup_logging()


def log_structured(event_type: str, data: Dict[str, Any]) -> None:
    """
    Log structured JSON data for log analytics

    Args:
        event_type: Type of event (e.g., "mask_completed", "tryon_failed")
        data: Dictionary containing event data
    """
    log_entry = {
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "event_type": event_type,
        **data
    }
    logger.info(json.dumps(log_entry, ensure_ascii=False, default=str))


@contextmanager
def log_step(step: str, data: Optional[Dict[str, Any]] = None) -> Iterator[None]:
    """
    Time one pipeline step and emit a `step_completed` / `step_failed` event

    Exceptions are logged and re-raised unchanged.
    """
    start = time.time()
    try:
        yield
    except Exception as e:
        log_structured("step_failed", {
            "step": step,
            "error": type(e).__name__,
            "duration_ms": round((time.time() - start) * 1000, 1),
            **(data or {})
        })
        raise
    log_structured("step_completed", {
        "step": step,
        "duration_ms": round((time.time() - start) * 1000, 1),
        **(data or {})
    })
