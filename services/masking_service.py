"""Hair masking service using fal.ai EVF-SAM"""

from typing import Dict, Any, Optional

from config.settings import settings
from core.cache import calculate_image_hash, get_cached_result, save_to_cache
from core.exceptions import MaskingAPIException
from core.logging import logger, log_structured
from services.circuit_breaker import fal_masking_breaker, with_circuit_breaker
from services.fal_base import FalModelService


class MaskingService(FalModelService):
    """
    Segments the scalp hair of a face image with a text-prompted SAM model

    The model is asked for the mask only (white hair, black elsewhere).
    Results are cached by image hash and prompt, so re-scanning the same
    photos does not pay for the model again.
    """

    MODEL = settings.MASKING_MODEL

    def mask_image(
        self,
        image_url: str,
        prompt: Optional[str] = None,
        use_queue: bool = False
    ) -> Dict[str, Any]:
        """
        Mask the hair region of one image

        Args:
            image_url: Public URL or base64 data URL of the image
            prompt: Masking prompt (defaults to MASKING_PROMPT)
            use_queue: Submit to the fal queue and poll instead of subscribing

        Returns:
            Dictionary with:
            - url: URL of the mask image
            - content_type: e.g. "image/png"
            - file_name, file_size: as reported by fal
            - cached: whether the result came from Redis

        Raises:
            MaskingAPIException: the model call failed or returned no image
            CircuitBreakerOpenException: too many recent failures
        """
        prompt = prompt or settings.MASKING_PROMPT
        cache_key = f"mask:{calculate_image_hash(image_url.encode('utf-8'), salt=prompt)}"

        cached = get_cached_result(cache_key)
        if cached:
            return {**cached, "cached": True}

        logger.info(f"🎭 Masking request ({len(image_url)} chars, queue={use_queue})")
        result = self._call_model(image_url, prompt, use_queue)

        save_to_cache(cache_key, result)
        log_structured("mask_completed", {
            "model": self.MODEL,
            "file_size": result.get("file_size"),
            "queue": use_queue
        })
        return {**result, "cached": False}

    def mask_image_with_queue(self, image_url: str, prompt: Optional[str] = None) -> Dict[str, Any]:
        """Same as mask_image, polling the fal queue every MASKING_POLL_INTERVAL"""
        return self.mask_image(image_url, prompt=prompt, use_queue=True)

    def mask_collage(self, collage_url: str) -> Dict[str, Any]:
        """Mask all faces of a collage in a single call"""
        return self.mask_image(collage_url, prompt=settings.COLLAGE_MASKING_PROMPT)

    @with_circuit_breaker(fal_masking_breaker)
    def _call_model(self, image_url: str, prompt: str, use_queue: bool) -> Dict[str, Any]:
        arguments = {
            "prompt": prompt,
            "image_url": image_url,
            "mask_only": True,
        }

        try:
            if use_queue:
                data = self._submit_and_poll(arguments, settings.MASKING_POLL_INTERVAL)
            else:
                data = self._subscribe(arguments)
        except Exception as e:
            logger.error(f"❌ Masking API error: {str(e)}")
            raise MaskingAPIException() from e

        image = (data or {}).get("image") or {}
        if not image.get("url"):
            logger.error(f"❌ Masking API returned no image: {data}")
            raise MaskingAPIException()

        return {
            "url": image["url"],
            "content_type": image.get("content_type", "image/png"),
            "file_name": image.get("file_name"),
            "file_size": image.get("file_size"),
        }


# Singleton instance
_masking_service: Optional[MaskingService] = None


def get_masking_service() -> MaskingService:
    """Get or create the masking service singleton"""
    global _masking_service
    if _masking_service is None:
        _masking_service = MaskingService()
    return _masking_service
