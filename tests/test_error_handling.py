"""
Tests for exception hierarchy and error translation
"""

import pytest

from api.endpoints.tryon import error_response
from core.exceptions import (
    GlamMefyException,
    RemoteAIException,
    MaskingAPIException,
    InpaintingAPIException,
    SegmentationAPIException,
    CircuitBreakerOpenException,
    ServiceNotConfiguredException,
    HairTemplateNotFoundException,
    ScanNotFoundException,
    InvalidFileFormatException,
    InvalidImageException,
    CollageException,
)
from core.monitoring import before_send_filter


class TestExceptionHierarchy:
    """Test exception class hierarchy"""

    @pytest.mark.parametrize("exc_type", [
        MaskingAPIException, InpaintingAPIException, SegmentationAPIException
    ])
    def test_remote_failures_share_a_base(self, exc_type):
        exc = exc_type()
        assert isinstance(exc, RemoteAIException)
        assert isinstance(exc, GlamMefyException)

    def test_direct_subclasses(self):
        """Every direct subclass is raised somewhere in the app"""
        names = {cls.__name__ for cls in GlamMefyException.__subclasses__()}

        assert names == {
            "InvalidFileFormatException", "InvalidImageException", "CollageException",
            "HairTemplateNotFoundException", "ScanNotFoundException",
            "UserAlreadyExistsException", "DatabaseException", "RemoteAIException",
            "ServiceNotConfiguredException", "CircuitBreakerOpenException",
        }

    def test_default_messages(self):
        assert MaskingAPIException().message == "Failed to process face collage"
        assert InpaintingAPIException().message == "Failed to generate hairstyle"
        assert "mohawk" in HairTemplateNotFoundException("mohawk").message
        assert CircuitBreakerOpenException("FalMasking").service_name == "FalMasking"


class TestErrorResponse:
    """Domain exceptions map to status codes and error codes"""

    @pytest.mark.parametrize("exc,status_code,error", [
        (InvalidFileFormatException(), 400, "invalid_file_format"),
        (InvalidImageException(), 400, "invalid_image"),
        (CollageException(), 400, "invalid_collage"),
        (HairTemplateNotFoundException("x"), 404, "template_not_found"),
        (ScanNotFoundException("x"), 404, "scan_not_found"),
        (CircuitBreakerOpenException("FalInpainting"), 503, "service_unavailable"),
        (ServiceNotConfiguredException("AILabAPI"), 503, "service_not_configured"),
        (MaskingAPIException(), 502, "masking_failed"),
        (InpaintingAPIException(), 502, "inpainting_failed"),
        (SegmentationAPIException(), 502, "segmentation_failed"),
        (GlamMefyException("boom"), 500, "internal_error"),
    ])
    def test_mapping(self, exc, status_code, error):
        response = error_response(exc)

        assert response.status_code == status_code
        assert b'"success":false' in response.body
        assert f'"error":"{error}"'.encode() in response.body


class TestSentryFilter:
    """Expected client errors are not reported"""

    def test_expected_exception_is_dropped(self):
        event = {"exception": {"values": [{"type": "ScanNotFoundException"}]}}

        assert before_send_filter(event, {}) is None

    def test_remote_failure_is_reported(self):
        event = {"exception": {"values": [{"type": "MaskingAPIException"}]}}

        assert before_send_filter(event, {}) == event

    def test_health_check_transactions_are_dropped(self):
        assert before_send_filter({"transaction": "GET /api/health"}, {}) is None
