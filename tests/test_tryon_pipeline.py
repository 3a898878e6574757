"""Tests for the scan -> generate try-on pipeline"""

import io
from unittest.mock import Mock, patch

import pytest
from PIL import Image

from core.exceptions import (
    CollageException,
    HairTemplateNotFoundException,
    InpaintingAPIException,
    InvalidImageException,
    ScanNotFoundException,
)
from services.collage_service import decode_image
from services.tryon_pipeline import TryOnPipeline


def png_bytes(color, size=(320, 240)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format="PNG")
    return buffer.getvalue()


VIEWS = [png_bytes((255, 0, 0)), png_bytes((0, 255, 0)), png_bytes((0, 0, 255))]
RESULT_URL = "https://fal.media/files/result.png"


@pytest.fixture
def masking():
    service = Mock()
    service.mask_image.return_value = {"url": "https://fal.media/files/mask.png", "cached": False}
    return service


@pytest.fixture
def inpainting():
    service = Mock()
    service.generate_hairstyle.return_value = {
        "images": [{"url": RESULT_URL}],
        "seed": 7,
        "has_nsfw_concepts": [False]
    }
    return service


@pytest.fixture
def segmentation():
    service = Mock()
    service.segment_hair.return_value = png_bytes((255, 255, 255), (64, 64))
    return service


@pytest.fixture
def pipeline(masking, inpainting, segmentation):
    return TryOnPipeline(masking, inpainting, segmentation, masking_provider="fal")


def fake_fetch(url):
    """Masks are white, results are a 900x300 strip"""
    if "mask" in url:
        return Image.new("L", (300, 300), color=255)
    return Image.new("RGB", (900, 300), color=(10, 20, 30))


class TestScan:

    @patch('services.tryon_pipeline.fetch_image', side_effect=fake_fetch)
    def test_masks_each_view_once(self, mock_fetch, pipeline, masking):
        result = pipeline.scan(VIEWS)

        assert masking.mask_image.call_count == 3
        for call in masking.mask_image.call_args_list:
            assert call[0][0].startswith("data:image/png;base64,")
        assert set(result["views"]) == {"left", "front", "right"}
        assert set(result["masks"]) == {"left", "front", "right"}

    @patch('services.tryon_pipeline.fetch_image', side_effect=fake_fetch)
    def test_builds_original_and_mask_collages(self, mock_fetch, pipeline):
        result = pipeline.scan(VIEWS)

        original = decode_image(result["original_collage"])
        mask = decode_image(result["mask_collage"])

        assert original.size == (900, 300)
        assert original.convert("RGB").getpixel((150, 150)) == (255, 0, 0)
        assert original.convert("RGB").getpixel((750, 150)) == (0, 0, 255)
        assert mask.size == (900, 300)
        assert mask.mode == "L"

    @patch('services.tryon_pipeline.fetch_image', side_effect=fake_fetch)
    def test_scan_is_stored_when_redis_is_available(self, mock_fetch, pipeline, mock_redis):
        result = pipeline.scan(VIEWS)

        assert result["stored"] is True
        key, ttl, _ = mock_redis.setex.call_args[0]
        assert key == f"scan:{result['scan_id']}"
        assert ttl == 3600

    @patch('services.tryon_pipeline.fetch_image', side_effect=fake_fetch)
    def test_scan_without_redis_is_not_stored(self, mock_fetch, pipeline):
        assert pipeline.scan(VIEWS)["stored"] is False

    @pytest.mark.parametrize("count", [1, 2, 4])
    def test_requires_three_views(self, pipeline, masking, count):
        with pytest.raises(CollageException):
            pipeline.scan(VIEWS[:1] * count)

        masking.mask_image.assert_not_called()

    def test_invalid_view_fails_before_masking(self, pipeline, masking):
        with pytest.raises(InvalidImageException):
            pipeline.scan([VIEWS[0], b"garbage", VIEWS[2]])

        masking.mask_image.assert_not_called()

    def test_oversized_view_fails_before_masking(self, pipeline, masking):
        with patch('services.collage_service.MAX_IMAGE_PIXELS', 1000):
            with pytest.raises(InvalidImageException):
                pipeline.scan(VIEWS)

        masking.mask_image.assert_not_called()

    def test_ailab_provider_uses_segmentation(self, masking, inpainting, segmentation):
        pipeline = TryOnPipeline(masking, inpainting, segmentation, masking_provider="ailab")

        result = pipeline.scan(VIEWS)

        assert segmentation.segment_hair.call_count == 3
        masking.mask_image.assert_not_called()
        assert decode_image(result["mask_collage"]).getpixel((10, 10)) == 255


class TestGenerate:

    @patch('services.tryon_pipeline.fetch_image', side_effect=fake_fetch)
    def test_generate_from_collages(self, mock_fetch, pipeline, inpainting):
        result = pipeline.generate(
            "curly",
            original_collage="data:image/png;base64,T1JJRw==",
            mask_collage="data:image/png;base64,TUFTSw=="
        )

        inpainting.generate_hairstyle.assert_called_once()
        original, mask, template = inpainting.generate_hairstyle.call_args[0]
        assert original == "data:image/png;base64,T1JJRw=="
        assert mask == "data:image/png;base64,TUFTSw=="
        assert template.id == "curly"

        assert result["result_url"] == RESULT_URL
        assert result["seed"] == 7
        assert list(result["views"]) == ["left", "front", "right"]
        for view in result["views"].values():
            assert view.startswith("data:image/jpeg;base64,")
            assert decode_image(view).size == (300, 300)

    @patch('services.tryon_pipeline.fetch_image', side_effect=fake_fetch)
    @patch('services.tryon_pipeline.get_cached_result')
    def test_generate_from_scan_id(self, mock_cached, mock_fetch, pipeline, inpainting):
        mock_cached.return_value = {"original_collage": "orig", "mask_collage": "mask"}

        pipeline.generate("streak", scan_id="abc")

        mock_cached.assert_called_once_with("scan:abc")
        assert inpainting.generate_hairstyle.call_args[0][:2] == ("orig", "mask")

    @patch('services.tryon_pipeline.get_cached_result', return_value=None)
    def test_unknown_scan_id(self, mock_cached, pipeline, inpainting):
        with pytest.raises(ScanNotFoundException):
            pipeline.generate("curly", scan_id="expired")

        inpainting.generate_hairstyle.assert_not_called()

    def test_missing_collages(self, pipeline):
        with pytest.raises(CollageException):
            pipeline.generate("curly", original_collage="only-one")

    def test_unknown_template(self, pipeline, inpainting):
        with pytest.raises(HairTemplateNotFoundException):
            pipeline.generate("mohawk", original_collage="a", mask_collage="b")

        inpainting.generate_hairstyle.assert_not_called()

    @patch('services.tryon_pipeline.fetch_image', side_effect=InvalidImageException())
    def test_split_failure_falls_back_to_result_url(self, mock_fetch, pipeline):
        result = pipeline.generate("curly", original_collage="a", mask_collage="b")

        assert result["views"] == {"left": RESULT_URL, "front": RESULT_URL, "right": RESULT_URL}
        assert result["result_collage"] == RESULT_URL

    @patch('services.collage_service.requests.get')
    def test_oversized_result_falls_back_to_result_url(self, mock_get, pipeline):
        mock_get.return_value = Mock(content=png_bytes("red", (900, 300)), raise_for_status=Mock())

        with patch('services.collage_service.MAX_IMAGE_PIXELS', 1000):
            result = pipeline.generate("curly", original_collage="a", mask_collage="b")

        assert result["views"]["front"] == RESULT_URL
        assert result["result_collage"] == RESULT_URL

    def test_inpainting_failure_propagates(self, pipeline, inpainting):
        inpainting.generate_hairstyle.side_effect = InpaintingAPIException()

        with pytest.raises(InpaintingAPIException):
            pipeline.generate("curly", original_collage="a", mask_collage="b")


class TestTryOn:

    @patch('services.tryon_pipeline.fetch_image', side_effect=fake_fetch)
    def test_one_shot(self, mock_fetch, pipeline, masking, inpainting):
        result = pipeline.try_on(VIEWS, "long-marron")

        assert masking.mask_image.call_count == 3
        inpainting.generate_hairstyle.assert_called_once()
        assert result["template_id"] == "long-marron"
        assert "scan_id" in result

    def test_unknown_template_fails_before_masking(self, pipeline, masking):
        with pytest.raises(HairTemplateNotFoundException):
            pipeline.try_on(VIEWS, "mohawk")

        masking.mask_image.assert_not_called()
