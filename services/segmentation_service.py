"""Hair segmentation using the AILabAPI portrait endpoint"""

import base64
import binascii
from typing import Dict, Any, Optional

import requests

from config.settings import settings
from core.exceptions import SegmentationAPIException, ServiceNotConfiguredException
from core.logging import logger, log_structured
from services.circuit_breaker import ailab_breaker, with_circuit_breaker


class SegmentationService:
    """
    Alternative hair masker backed by AILabAPI

    Used when MASKING_PROVIDER=ailab. Returns the mask as PNG bytes so the
    pipeline can treat it like a downloaded fal mask.
    """

    def __init__(self, api_key: Optional[str] = None, endpoint: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.AILAB_API_KEY
        self.endpoint = endpoint or settings.AILAB_HAIR_SEGMENTATION_URL

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def segment_hair(self, image_data: bytes, filename: str = "image.png") -> bytes:
        """
        Segment the hair of one face image

        Args:
            image_data: Image binary data
            filename: Name sent with the multipart upload

        Returns:
            Mask image bytes

        Raises:
            ServiceNotConfiguredException: AILAB_API_KEY is not set
            SegmentationAPIException: HTTP error or non-zero error_code
        """
        if not self.is_configured:
            raise ServiceNotConfiguredException("AILabAPI hair segmentation")

        return self._request(image_data, filename)

    @with_circuit_breaker(ailab_breaker)
    def _request(self, image_data: bytes, filename: str) -> bytes:
        try:
            response = requests.post(
                self.endpoint,
                headers={"ailabapi-api-key": self.api_key},
                files={"image": (filename, image_data)},
                timeout=settings.HTTP_TIMEOUT
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"❌ AILabAPI request failed: {str(e)}")
            raise SegmentationAPIException() from e

        error_code = payload.get("error_code", 0)
        if error_code != 0:
            message = payload.get("error_msg") or payload.get("error_detail", {}).get("message")
            logger.error(f"❌ AILabAPI error {error_code}: {message}")
            raise SegmentationAPIException(f"Hair segmentation failed: {message or error_code}")

        mask = self._extract_mask(payload.get("data") or {})

        log_structured("segmentation_completed", {
            "provider": "ailab",
            "request_id": payload.get("request_id"),
            "mask_bytes": len(mask)
        })
        return mask

    def _extract_mask(self, data: Dict[str, Any]) -> bytes:
        """The endpoint answers with either a result URL or inline base64"""
        elements = data.get("elements") or [data]
        element = elements[0] if elements else {}

        image_url = element.get("image_url")
        if image_url:
            try:
                response = requests.get(image_url, timeout=settings.HTTP_TIMEOUT)
                response.raise_for_status()
            except requests.RequestException as e:
                logger.error(f"❌ AILabAPI mask download failed: {str(e)}")
                raise SegmentationAPIException() from e
            return response.content

        inline = element.get("image") or element.get("mask")
        if inline:
            try:
                return base64.b64decode(inline)
            except (binascii.Error, ValueError) as e:
                raise SegmentationAPIException("Hair segmentation returned an unreadable mask") from e

        logger.error(f"❌ AILabAPI returned no mask: {list(data.keys())}")
        raise SegmentationAPIException("Hair segmentation returned no mask")


# Singleton instance
_segmentation_service: Optional[SegmentationService] = None


def get_segmentation_service() -> SegmentationService:
    """Get or create the segmentation service singleton"""
    global _segmentation_service
    if _segmentation_service is None:
        _segmentation_service = SegmentationService()
    return _segmentation_service
