"""
Face collage utilities

The try-on pipeline works on a single horizontal strip of the three scanned
views (left, front, right). These helpers decode uploads and data URLs,
compose the strip, split a generated strip back into views and encode images
as data URLs for the remote models and the client.
"""

import base64
import binascii
import io
from typing import List, Sequence, Union

import requests
from PIL import Image, UnidentifiedImageError

from config.settings import settings
from core.exceptions import CollageException, InvalidImageException
from core.logging import logger

VIEW_NAMES = ("left", "front", "right")
COLLAGE_PARTS = len(VIEW_NAMES)

# 8000x6000 phone photos fit; anything larger is rejected before pixels are loaded
MAX_IMAGE_PIXELS = 50_000_000


def decode_image(data: Union[bytes, str]) -> Image.Image:
    """
    Decode raw bytes, a base64 string or a `data:` URL into a PIL image

    Raises:
        InvalidImageException: data is empty or not a readable image
    """
    if not data:
        raise InvalidImageException()

    if isinstance(data, str):
        payload = data.partition(",")[2] if data.startswith("data:") else data
        if not payload:
            raise InvalidImageException("Data URL has no image payload")
        try:
            data = base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError):
            raise InvalidImageException()

    try:
        image = Image.open(io.BytesIO(data))
    except Image.DecompressionBombError as e:
        logger.warning(f"⚠️ Rejected oversized image: {str(e)}")
        raise InvalidImageException("Image dimensions are too large")
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"⚠️ Could not decode image: {str(e)}")
        raise InvalidImageException()

    width, height = image.size
    if width * height > MAX_IMAGE_PIXELS:
        logger.warning(f"⚠️ Rejected oversized image: {width}x{height}")
        raise InvalidImageException("Image dimensions are too large")

    try:
        image.load()
    except (Image.DecompressionBombError, UnidentifiedImageError, OSError) as e:
        logger.warning(f"⚠️ Could not decode image: {str(e)}")
        raise InvalidImageException()

    return image


def to_data_url(image: Image.Image, image_format: str = "PNG", quality: int = 90) -> str:
    """Encode a PIL image as a base64 data URL"""
    buffer = io.BytesIO()
    image_format = image_format.upper()

    if image_format in ("JPEG", "JPG"):
        image.convert("RGB").save(buffer, format="JPEG", quality=quality)
        mime = "image/jpeg"
    else:
        image.save(buffer, format=image_format)
        mime = f"image/{image_format.lower()}"

    encoded = base64.b64encode(buffer.getvalue()).decode("utf-8")
    return f"data:{mime};base64,{encoded}"


def to_png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def compose_collage(
    images: Sequence[Image.Image],
    tile_size: int = None,
    mode: str = "RGB"
) -> Image.Image:
    """
    Draw the three views side by side on one canvas

    Each view is stretched to a square tile, matching how the capture
    canvas drew them.

    Args:
        images: Exactly three images, in left/front/right order
        tile_size: Tile edge in pixels (defaults to COLLAGE_TILE_SIZE)
        mode: "RGB" for photos, "L" for masks

    Returns:
        Image of size (3 * tile_size, tile_size)
    """
    tile_size = tile_size or settings.COLLAGE_TILE_SIZE

    if len(images) != COLLAGE_PARTS:
        raise CollageException(
            f"A collage needs exactly {COLLAGE_PARTS} images, got {len(images)}"
        )

    collage = Image.new(mode, (tile_size * COLLAGE_PARTS, tile_size))
    for index, image in enumerate(images):
        tile = image.convert(mode).resize((tile_size, tile_size), Image.Resampling.LANCZOS)
        collage.paste(tile, (index * tile_size, 0))

    return collage


def split_collage(
    collage: Image.Image,
    parts: int = COLLAGE_PARTS,
    tile_size: int = None
) -> List[Image.Image]:
    """
    Cut a horizontal collage back into square views

    Inpainting may return a different resolution than it was given, so the
    collage is resized to (parts * tile_size, tile_size) first.
    """
    tile_size = tile_size or settings.COLLAGE_TILE_SIZE

    if parts < 1:
        raise CollageException("Cannot split a collage into zero parts")

    expected = (tile_size * parts, tile_size)
    if collage.size != expected:
        logger.info(f"↔️ Resizing collage {collage.size} -> {expected} before split")
        collage = collage.resize(expected, Image.Resampling.LANCZOS)

    return [
        collage.crop((i * tile_size, 0, (i + 1) * tile_size, tile_size))
        for i in range(parts)
    ]


def fetch_image(url: str, timeout: int = None) -> Image.Image:
    """
    Load an image from a remote URL or a data URL

    Raises:
        InvalidImageException: download failed or content is not an image
    """
    if url.startswith("data:"):
        return decode_image(url)

    try:
        response = requests.get(url, timeout=timeout or settings.HTTP_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"❌ Image download failed: {str(e)}")
        raise InvalidImageException(f"Could not download image: {url[:80]}")

    return decode_image(response.content)
