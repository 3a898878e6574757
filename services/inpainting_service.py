"""Hairstyle generation using fal.ai FLUX.1 general inpainting + style LoRA"""

from typing import Dict, Any, Optional

from config.settings import settings
from core.exceptions import InpaintingAPIException
from core.logging import logger, log_structured
from services.circuit_breaker import fal_inpainting_breaker, with_circuit_breaker
from services.fal_base import FalModelService
from services.hair_templates import HairTemplate


# Sampling parameters tuned for hair replacement on 900x300 collages
INPAINTING_PARAMETERS: Dict[str, Any] = {
    "num_inference_steps": 28,
    "guidance_scale": 3.5,
    "real_cfg_scale": 3.5,
    "strength": 0.85,
    "num_images": 1,
    "enable_safety_checker": True,
    "reference_strength": 0.65,
    "reference_end": 1,
    "base_shift": 0.5,
    "max_shift": 1.15,
    "output_format": "png",
    "scheduler": "euler",
}


class InpaintingService(FalModelService):
    """
    Paints a new hairstyle inside the hair mask of the original collage

    Image A is the collage of the three scanned views, image M is the
    matching mask collage; the template supplies the prompt and LoRA.
    """

    MODEL = settings.INPAINTING_MODEL

    def build_arguments(
        self,
        original_image_url: str,
        mask_image_url: str,
        template: HairTemplate
    ) -> Dict[str, Any]:
        return {
            "prompt": template.prompt,
            "image_url": original_image_url,
            "mask_url": mask_image_url,
            **INPAINTING_PARAMETERS,
            "loras": [
                {
                    "path": template.lora_path,
                    "scale": 1.0
                }
            ],
        }

    @with_circuit_breaker(fal_inpainting_breaker)
    def generate_hairstyle(
        self,
        original_image_url: str,
        mask_image_url: str,
        template: HairTemplate,
        use_queue: bool = False
    ) -> Dict[str, Any]:
        """
        Generate the new hairstyle

        Args:
            original_image_url: Original collage (URL or data URL)
            mask_image_url: Mask collage (URL or data URL)
            template: Hairstyle template to apply
            use_queue: Submit to the fal queue and poll instead of subscribing

        Returns:
            fal result with `images` (url, content_type, width, height),
            `prompt`, `seed` and `has_nsfw_concepts`

        Raises:
            InpaintingAPIException: the call failed or produced no image
        """
        arguments = self.build_arguments(original_image_url, mask_image_url, template)

        logger.info(f"🎨 Hair generation started: {template.name} (lora={template.lora_path[-40:]})")

        try:
            if use_queue:
                data = self._submit_and_poll(arguments, settings.INPAINTING_POLL_INTERVAL)
            else:
                data = self._subscribe(arguments)
        except Exception as e:
            logger.error(f"❌ Hair generation API error: {str(e)}")
            raise InpaintingAPIException() from e

        images = (data or {}).get("images") or []
        if not images or not images[0].get("url"):
            logger.error("❌ Hair generation returned no images")
            raise InpaintingAPIException()

        log_structured("inpainting_completed", {
            "model": self.MODEL,
            "template_id": template.id,
            "seed": data.get("seed"),
            "images": len(images),
            "nsfw": data.get("has_nsfw_concepts")
        })

        return {
            "images": images,
            "prompt": data.get("prompt", template.prompt),
            "seed": data.get("seed"),
            "has_nsfw_concepts": data.get("has_nsfw_concepts", []),
        }


# Singleton instance
_inpainting_service: Optional[InpaintingService] = None


def get_inpainting_service() -> InpaintingService:
    """Get or create the inpainting service singleton"""
    global _inpainting_service
    if _inpainting_service is None:
        _inpainting_service = InpaintingService()
    return _inpainting_service
