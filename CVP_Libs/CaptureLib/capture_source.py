"""
Capture Source for CV Photo Studio.

Manages the camera stream lifecycle and file-based image ingestion. Both
paths produce an RGB ImageArtifact at the source's native resolution.

Classes:
    CaptureConstraints: Requested camera device and resolution
    StreamHandle: Live camera stream with idempotent, thread-safe release

Functions:
    start_capture: Open a camera stream
    stop_capture: Release a camera stream
    capture_frame: Snapshot the current frame
    ingest_file: Decode an uploaded image file
    heif_supported: Whether Pillow has a HEIF decoder registered
"""

import io
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

import cv2
from PIL import Image, ImageOps, UnidentifiedImageError

from CVP_Libs.ImageEditingLib.image_models import ImageArtifact
from CVP_Libs.constants import (
    DEFAULT_CAMERA_INDEX,
    DEFAULT_CAMERA_RESOLUTION,
    HEIF_MIME_TYPES,
    MAX_UPLOAD_BYTES,
    SUPPORTED_MIME_TYPES,
)
from CVP_Libs.exceptions import (
    DeviceUnavailable,
    FileTooLarge,
    ImageDecodeError,
    UnsupportedFormat,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureConstraints:
    """Requested camera device and ideal frame size.

    The resolution is a hint; the device decides what it actually delivers.
    """
    device_index: int = DEFAULT_CAMERA_INDEX
    resolution: Tuple[int, int] = DEFAULT_CAMERA_RESOLUTION


class StreamHandle:
    """
    Live camera stream.

    Reads and release are serialized by a lock, so stopping the stream while
    a frame read is in flight is safe: the read completes against the open
    device and its result is discarded.
    """

    def __init__(self, capture: Any, constraints: CaptureConstraints):
        self._capture = capture
        self.constraints = constraints
        self._lock = threading.Lock()
        self._stopped = False

    @property
    def is_active(self) -> bool:
        return not self._stopped

    def read(self) -> Optional[Any]:
        """Read one BGR frame; None once the stream has been stopped."""
        with self._lock:
            if self._stopped:
                return None
            ok, frame = self._capture.read()
        if self._stopped:
            return None
        if not ok or frame is None:
            raise DeviceUnavailable(
                f"Camera {self.constraints.device_index} returned no frame"
            )
        return frame

    def release(self) -> bool:
        """Release the device. Returns False when it was already released."""
        if self._stopped:
            return False
        self._stopped = True
        with self._lock:
            self._capture.release()
        return True


def start_capture(
    constraints: Optional[CaptureConstraints] = None,
    capture_factory: Callable[[int], Any] = cv2.VideoCapture,
) -> StreamHandle:
    """
    Open a live camera stream.

    Args:
        constraints: Device index and ideal resolution
        capture_factory: Callable returning a cv2.VideoCapture-like object

    Returns:
        StreamHandle for the opened device

    Raises:
        DeviceUnavailable: If the device is missing or cannot be opened
    """
    constraints = constraints or CaptureConstraints()
    try:
        capture = capture_factory(constraints.device_index)
    except (cv2.error, OSError) as e:
        raise DeviceUnavailable(f"Cannot open camera {constraints.device_index}: {e}") from e

    if capture is None or not capture.isOpened():
        if capture is not None:
            capture.release()
        raise DeviceUnavailable(f"Camera {constraints.device_index} is not available")

    width, height = constraints.resolution
    capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    logger.info(f"Camera {constraints.device_index} opened (ideal {width}x{height})")
    return StreamHandle(capture, constraints)


def stop_capture(handle: Optional[StreamHandle]) -> None:
    """Release the camera stream; safe to call more than once."""
    if handle is None:
        return
    if handle.release():
        logger.info(f"Camera {handle.constraints.device_index} released")


def capture_frame(handle: StreamHandle) -> Optional[ImageArtifact]:
    """
    Snapshot the current video frame.

    Returns:
        RGB ImageArtifact at native resolution, or None if the stream was
        stopped before or during the read

    Raises:
        DeviceUnavailable: If a live stream fails to deliver a frame
    """
    frame = handle.read()
    if frame is None:
        logger.debug("Frame request settled after stream stop; ignored")
        return None
    rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
    return ImageArtifact(Image.fromarray(rgb), label="capture")


def heif_supported() -> bool:
    """True when a HEIF/HEIC decoder plugin is registered with Pillow."""
    return ".heic" in Image.registered_extensions()


def _accepted_mime(mime_type: str) -> bool:
    if mime_type in SUPPORTED_MIME_TYPES:
        return True
    return mime_type in HEIF_MIME_TYPES and heif_supported()


def ingest_file(file_bytes: bytes, declared_mime_type: str) -> ImageArtifact:
    """
    Decode an uploaded image file.

    The MIME type is checked first, then the size; nothing is decoded for a
    rejected file.

    Args:
        file_bytes: Raw file contents
        declared_mime_type: MIME type reported by the picker/upload

    Returns:
        RGB ImageArtifact with EXIF orientation applied

    Raises:
        UnsupportedFormat: MIME type outside JPEG/PNG/WebP (HEIC when supported)
        FileTooLarge: More than 10 MiB
        ImageDecodeError: Bytes could not be decoded
    """
    mime_type = (declared_mime_type or "").strip().lower()
    if not _accepted_mime(mime_type):
        logger.warning(f"Rejected upload with MIME type {mime_type!r}")
        raise UnsupportedFormat(mime_type)

    size = len(file_bytes)
    if size > MAX_UPLOAD_BYTES:
        logger.warning(f"Rejected upload of {size} bytes")
        raise FileTooLarge(size, MAX_UPLOAD_BYTES)

    try:
        with Image.open(io.BytesIO(file_bytes)) as img:
            img.load()
            image = ImageOps.exif_transpose(img).convert("RGB")
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise ImageDecodeError(f"Could not decode {mime_type} upload: {e}") from e

    logger.info(f"Ingested {mime_type} upload {image.width}x{image.height}")
    return ImageArtifact(image, label="upload")
