"""
Virtual try-on pipeline

scan:     3 views -> per-view hair masks -> original collage + mask collage
generate: collages + template -> FLUX inpainting -> 3 before/after views
"""

import time
import uuid
from typing import Dict, Any, List, Optional, Sequence

from PIL import Image

from config.settings import settings
from core.cache import get_cached_result, save_to_cache
from core.exceptions import (
    CollageException,
    InvalidImageException,
    ScanNotFoundException,
)
from core.logging import logger, log_step, log_structured
from core.monitoring import add_breadcrumb
from services.collage_service import (
    COLLAGE_PARTS,
    VIEW_NAMES,
    compose_collage,
    decode_image,
    fetch_image,
    split_collage,
    to_data_url,
    to_png_bytes,
)
from services.hair_templates import get_template
from services.inpainting_service import InpaintingService, get_inpainting_service
from services.masking_service import MaskingService, get_masking_service
from services.segmentation_service import SegmentationService, get_segmentation_service


class TryOnPipeline:
    """Sequential orchestration of masking, collage and inpainting"""

    def __init__(
        self,
        masking_service: Optional[MaskingService] = None,
        inpainting_service: Optional[InpaintingService] = None,
        segmentation_service: Optional[SegmentationService] = None,
        masking_provider: Optional[str] = None
    ):
        self.masking_service = masking_service or get_masking_service()
        self.inpainting_service = inpainting_service or get_inpainting_service()
        self.segmentation_service = segmentation_service or get_segmentation_service()
        self.masking_provider = (masking_provider or settings.MASKING_PROVIDER).lower()

    # ========== Masking ==========

    def mask_view(self, image: Image.Image, prompt: Optional[str] = None) -> Image.Image:
        """
        Produce a grayscale hair mask for one view

        Raises:
            MaskingAPIException / SegmentationAPIException: remote failure
            InvalidImageException: the mask could not be downloaded
        """
        if self.masking_provider == "ailab":
            mask_bytes = self.segmentation_service.segment_hair(to_png_bytes(image))
            mask = decode_image(mask_bytes)
        else:
            result = self.masking_service.mask_image(to_data_url(image), prompt=prompt)
            mask = fetch_image(result["url"])

        return mask.convert("L")

    # ========== Scan ==========

    def scan(self, views: Sequence[bytes]) -> Dict[str, Any]:
        """
        Mask the three scanned views and build both collages

        Args:
            views: Image bytes in left, front, right order

        Returns:
            Dictionary with:
            - scan_id: key for a later `generate` call
            - stored: whether the scan was saved in Redis
            - views / masks: PNG data URLs keyed by view name
            - original_collage / mask_collage: PNG data URLs
            - processing_time: seconds
        """
        start_time = time.time()

        if len(views) != COLLAGE_PARTS:
            raise CollageException(
                f"Exactly {COLLAGE_PARTS} views are required (left, front, right), got {len(views)}"
            )

        images = [decode_image(data).convert("RGB") for data in views]

        masks: List[Image.Image] = []
        for index, image in enumerate(images, start=1):
            logger.info(f"🎭 Masking image {index}/{COLLAGE_PARTS}...")
            add_breadcrumb(f"Masking view {index}/{COLLAGE_PARTS}", data={"provider": self.masking_provider})
            with log_step("mask_view", {"view": VIEW_NAMES[index - 1], "provider": self.masking_provider}):
                masks.append(self.mask_view(image))

        logger.info("🧩 Creating collage from masked images...")
        original_collage = to_data_url(compose_collage(images))
        mask_collage = to_data_url(compose_collage(masks, mode="L"))

        scan_id = uuid.uuid4().hex
        stored = save_to_cache(
            f"scan:{scan_id}",
            {"original_collage": original_collage, "mask_collage": mask_collage},
            ttl=settings.SCAN_TTL
        )

        processing_time = round(time.time() - start_time, 2)
        log_structured("scan_completed", {
            "scan_id": scan_id,
            "provider": self.masking_provider,
            "stored": stored,
            "processing_time": processing_time
        })

        return {
            "scan_id": scan_id,
            "stored": stored,
            "views": {name: to_data_url(image) for name, image in zip(VIEW_NAMES, images)},
            "masks": {name: to_data_url(mask) for name, mask in zip(VIEW_NAMES, masks)},
            "original_collage": original_collage,
            "mask_collage": mask_collage,
            "processing_time": processing_time
        }

    # ========== Generate ==========

    def resolve_collages(
        self,
        scan_id: Optional[str] = None,
        original_collage: Optional[str] = None,
        mask_collage: Optional[str] = None
    ) -> Dict[str, str]:
        """
        Find the collages to inpaint, from Redis or from the request

        Raises:
            ScanNotFoundException: scan_id is unknown or expired
            CollageException: neither a scan_id nor both collages were given
        """
        if scan_id:
            cached = get_cached_result(f"scan:{scan_id}")
            if not cached:
                raise ScanNotFoundException(scan_id)
            return {
                "original_collage": cached["original_collage"],
                "mask_collage": cached["mask_collage"]
            }

        if original_collage and mask_collage:
            return {"original_collage": original_collage, "mask_collage": mask_collage}

        raise CollageException("Provide a scan_id or both original_collage and mask_collage")

    def generate(
        self,
        template_id: str,
        scan_id: Optional[str] = None,
        original_collage: Optional[str] = None,
        mask_collage: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Paint the template hairstyle onto a scanned face

        Returns:
            Dictionary with template_id, result_url, result_collage,
            views (left/front/right JPEG data URLs), seed,
            has_nsfw_concepts and processing_time
        """
        start_time = time.time()

        template = get_template(template_id)
        collages = self.resolve_collages(scan_id, original_collage, mask_collage)

        logger.info(f"💇 Generating '{template.name}' hairstyle...")
        add_breadcrumb("Inpainting collage", data={"template_id": template.id, "scan_id": scan_id})
        with log_step("inpainting", {"template_id": template.id}):
            result = self.inpainting_service.generate_hairstyle(
                collages["original_collage"],
                collages["mask_collage"],
                template
            )
        result_url = result["images"][0]["url"]

        logger.info("✂️ Splitting result collage into views...")
        try:
            result_image = fetch_image(result_url)
            views = [
                to_data_url(view, "JPEG", quality=settings.RESULT_JPEG_QUALITY)
                for view in split_collage(result_image)
            ]
            result_collage = to_data_url(result_image, "JPEG", quality=settings.RESULT_JPEG_QUALITY)
            split_ok = True
        except (InvalidImageException, CollageException) as e:
            logger.warning(f"⚠️ Could not split result, falling back to result URL: {e.message}")
            views = [result_url] * COLLAGE_PARTS
            result_collage = result_url
            split_ok = False

        processing_time = round(time.time() - start_time, 2)
        log_structured("tryon_completed", {
            "template_id": template.id,
            "scan_id": scan_id,
            "seed": result.get("seed"),
            "split_ok": split_ok,
            "processing_time": processing_time
        })

        return {
            "template_id": template.id,
            "result_url": result_url,
            "result_collage": result_collage,
            "views": dict(zip(VIEW_NAMES, views)),
            "seed": result.get("seed"),
            "has_nsfw_concepts": result.get("has_nsfw_concepts", []),
            "processing_time": processing_time
        }

    def try_on(self, views: Sequence[bytes], template_id: str) -> Dict[str, Any]:
        """Scan and generate in one call"""
        # fail before paying for masking
        get_template(template_id)

        scan = self.scan(views)
        result = self.generate(
            template_id,
            original_collage=scan["original_collage"],
            mask_collage=scan["mask_collage"]
        )
        result["scan_id"] = scan["scan_id"]
        result["processing_time"] = round(result["processing_time"] + scan["processing_time"], 2)
        return result


# Singleton instance
_pipeline: Optional[TryOnPipeline] = None


def get_tryon_pipeline() -> TryOnPipeline:
    """Get or create the try-on pipeline singleton"""
    global _pipeline
    if _pipeline is None:
        _pipeline = TryOnPipeline()
    return _pipeline
