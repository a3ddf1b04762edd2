"""Exception taxonomy for the photo pipeline.

Every failure a stage can report derives from ``PhotoPipelineError`` so the
workflow can recover from any of them in one place. Caller contract
violations stay ``ValueError``/``TypeError``.
"""

from typing import Optional


class PhotoPipelineError(Exception):
    """
    Base class for recoverable photo pipeline failures.

    Attributes:
        message: Error description
        user_message: Short text suitable for showing to the user
    """

    default_user_message = "Something went wrong while processing the photo."

    def __init__(self, message: str, user_message: Optional[str] = None):
        self.message = message
        self.user_message = user_message or self.default_user_message
        super().__init__(message)


class DeviceUnavailable(PhotoPipelineError):
    """Camera permission denied, device missing, or stream not readable."""

    default_user_message = "Camera is not available. Upload a photo file instead."


class UnsupportedFormat(PhotoPipelineError):
    """Uploaded file has a MIME type outside the accepted set."""

    default_user_message = "Unsupported format. Use JPEG, PNG or WebP."

    def __init__(self, mime_type: str, user_message: Optional[str] = None):
        self.mime_type = mime_type
        super().__init__(f"Unsupported image type: {mime_type!r}", user_message)


class FileTooLarge(PhotoPipelineError):
    """Uploaded file exceeds the size limit."""

    default_user_message = "File is too large. Maximum size is 10 MB."

    def __init__(self, size: int, limit: int, user_message: Optional[str] = None):
        self.size = size
        self.limit = limit
        super().__init__(f"File of {size} bytes exceeds limit of {limit} bytes", user_message)


class ImageDecodeError(PhotoPipelineError):
    """Image bytes or an artifact could not be decoded."""

    default_user_message = "The image could not be read."


class ArtifactReleasedError(ImageDecodeError):
    """An artifact was used after its pixels were released."""


class TemplateApplyFailed(PhotoPipelineError):
    """Background template compositing failed; nothing was published."""

    default_user_message = "The template could not be applied. Try again."

    def __init__(self, message: str, template_id: Optional[str] = None,
                 user_message: Optional[str] = None):
        self.template_id = template_id
        super().__init__(message, user_message)


class ExportFailed(PhotoPipelineError):
    """The final image could not be written."""

    default_user_message = "The photo could not be saved. Check the export folder and try again."
