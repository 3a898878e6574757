"""Services module for GlamMefy Backend"""

from services.masking_service import MaskingService
from services.inpainting_service import InpaintingService
from services.segmentation_service import SegmentationService
from services.tryon_pipeline import TryOnPipeline

__all__ = [
    "MaskingService",
    "InpaintingService",
    "SegmentationService",
    "TryOnPipeline",
]
