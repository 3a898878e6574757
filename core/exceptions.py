"""Custom exception classes for GlamMefy Backend"""


class GlamMefyException(Exception):
    """Base exception for GlamMefy application"""

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class InvalidFileFormatException(GlamMefyException):
    """Raised when uploaded file format is invalid"""

    def __init__(self, message: str = "Unsupported file format. Please upload jpg, jpeg, png or webp."):
        super().__init__(message)


class InvalidImageException(GlamMefyException):
    """Raised when image data cannot be decoded"""

    def __init__(self, message: str = "Could not read the image. Please upload a valid image file."):
        super().__init__(message)


class CollageException(GlamMefyException):
    """Raised when a collage cannot be composed or split"""

    def __init__(self, message: str = "Failed to build the face collage"):
        super().__init__(message)


class HairTemplateNotFoundException(GlamMefyException):
    """Raised when a style template id is unknown"""

    def __init__(self, template_id: str, message: str = None):
        if message is None:
            message = f"Hair template not found: {template_id}"
        self.template_id = template_id
        super().__init__(message)


class ScanNotFoundException(GlamMefyException):
    """Raised when a scan id is unknown or expired"""

    def __init__(self, scan_id: str, message: str = None):
        if message is None:
            message = f"Scan not found or expired: {scan_id}. Please scan your face again."
        self.scan_id = scan_id
        super().__init__(message)


class UserAlreadyExistsException(GlamMefyException):
    """Raised when registering a username that is taken"""

    def __init__(self, username: str, message: str = None):
        if message is None:
            message = f"Username already exists: {username}"
        self.username = username
        super().__init__(message)


class DatabaseException(GlamMefyException):
    """Raised when database operations fail"""

    def __init__(self, message: str = "A database error occurred"):
        super().__init__(message)


class RemoteAIException(GlamMefyException):
    """Raised when a remote AI service call fails"""

    def __init__(self, message: str = "Remote AI service error"):
        super().__init__(message)


class MaskingAPIException(RemoteAIException):
    """Raised when the hair masking model fails"""

    def __init__(self, message: str = "Failed to process face collage"):
        super().__init__(message)


class InpaintingAPIException(RemoteAIException):
    """Raised when the inpainting model fails"""

    def __init__(self, message: str = "Failed to generate hairstyle"):
        super().__init__(message)


class SegmentationAPIException(RemoteAIException):
    """Raised when AILabAPI hair segmentation fails"""

    def __init__(self, message: str = "Hair segmentation failed"):
        super().__init__(message)


class ServiceNotConfiguredException(GlamMefyException):
    """Raised when an optional remote service has no credentials"""

    def __init__(self, service_name: str, message: str = None):
        if message is None:
            message = f"{service_name} is not configured on this server"
        self.service_name = service_name
        super().__init__(message)


class CircuitBreakerOpenException(GlamMefyException):
    """Raised when circuit breaker is open (service unavailable)"""

    def __init__(self, service_name: str = "Service", message: str = None):
        if message is None:
            message = f"{service_name} is temporarily unavailable. Please try again shortly."
        self.service_name = service_name
        super().__init__(message)
