"""
Tests for the capture source.

Tests cover:
- File ingestion: MIME checks, size limit, decoding, EXIF orientation
- Camera stream lifecycle with a fake capture device
- Stopping the stream while a frame read is in flight
"""

import io
import threading
import time

import cv2
import pytest
from PIL import Image

from CVP_Libs.CaptureLib.capture_source import (
    CaptureConstraints,
    capture_frame,
    heif_supported,
    ingest_file,
    start_capture,
    stop_capture,
)
from CVP_Libs.constants import MAX_UPLOAD_BYTES
from CVP_Libs.exceptions import (
    DeviceUnavailable,
    FileTooLarge,
    ImageDecodeError,
    UnsupportedFormat,
)


class TestIngestFile:
    """Tests for ingest_file."""

    def test_jpeg_upload(self, jpeg_bytes):
        artifact = ingest_file(jpeg_bytes, "image/jpeg")
        assert artifact.size == (400, 300)
        assert artifact.image.mode == "RGB"
        assert artifact.label == "upload"

    def test_png_upload(self, png_bytes):
        artifact = ingest_file(png_bytes, "image/png")
        assert artifact.size == (300, 400)

    def test_mime_type_is_case_insensitive(self, png_bytes):
        assert ingest_file(png_bytes, "IMAGE/PNG").size == (300, 400)

    def test_gif_is_rejected(self):
        """GIF is outside the accepted set."""
        buffer = io.BytesIO()
        Image.new("P", (10, 10)).save(buffer, format="GIF")
        with pytest.raises(UnsupportedFormat) as excinfo:
            ingest_file(buffer.getvalue(), "image/gif")
        assert excinfo.value.mime_type == "image/gif"

    def test_too_large_is_rejected(self):
        """An 11 MiB upload exceeds the 10 MiB limit."""
        data = b"\0" * (11 * 1024 * 1024)
        with pytest.raises(FileTooLarge) as excinfo:
            ingest_file(data, "image/jpeg")
        assert excinfo.value.limit == MAX_UPLOAD_BYTES

    def test_mime_checked_before_size(self):
        """A large file of the wrong type reports the type, not the size."""
        with pytest.raises(UnsupportedFormat):
            ingest_file(b"\0" * (11 * 1024 * 1024), "application/pdf")

    def test_corrupt_bytes(self):
        with pytest.raises(ImageDecodeError):
            ingest_file(b"definitely not an image", "image/jpeg")

    def test_exif_orientation_applied(self):
        """An image tagged 'rotate 90' is delivered upright."""
        image = Image.new("RGB", (200, 100), (10, 10, 10))
        exif = image.getexif()
        exif[0x0112] = 6
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", exif=exif.tobytes())

        artifact = ingest_file(buffer.getvalue(), "image/jpeg")
        assert artifact.size == (100, 200)

    @pytest.mark.skipif(heif_supported(), reason="HEIF decoder installed")
    def test_heic_rejected_without_decoder(self):
        with pytest.raises(UnsupportedFormat):
            ingest_file(b"\0" * 100, "image/heic")


class TestCameraStream:
    """Tests for start/capture/stop with a fake device."""

    def test_start_sets_resolution(self, fake_capture_factory):
        handle = start_capture(CaptureConstraints(2, (1920, 1080)), fake_capture_factory)
        capture = fake_capture_factory.created[0]

        assert handle.is_active
        assert capture.index == 2
        assert capture.properties[cv2.CAP_PROP_FRAME_WIDTH] == 1920
        assert capture.properties[cv2.CAP_PROP_FRAME_HEIGHT] == 1080

    def test_unavailable_device(self, fake_capture_factory):
        """A device that does not open raises DeviceUnavailable and is released."""
        def factory(index):
            return fake_capture_factory(index, opened=False)

        with pytest.raises(DeviceUnavailable):
            start_capture(CaptureConstraints(), factory)
        assert fake_capture_factory.created[0].released == 1

    def test_factory_error(self):
        def factory(index):
            raise OSError("permission denied")

        with pytest.raises(DeviceUnavailable):
            start_capture(CaptureConstraints(), factory)

    def test_capture_frame_converts_bgr(self, fake_capture_factory):
        """Frames arrive as BGR and are delivered as RGB at native size."""
        def factory(index):
            return fake_capture_factory(index, frame_size=(320, 240), bgr=(255, 0, 0))

        handle = start_capture(CaptureConstraints(), factory)
        artifact = capture_frame(handle)

        assert artifact.size == (320, 240)
        assert artifact.image.getpixel((5, 5)) == (0, 0, 255)
        assert artifact.label == "capture"

    def test_failed_read(self, fake_capture_factory):
        def factory(index):
            return fake_capture_factory(index, fail_reads=True)

        handle = start_capture(CaptureConstraints(), factory)
        with pytest.raises(DeviceUnavailable):
            capture_frame(handle)

    def test_stop_is_idempotent(self, fake_capture_factory):
        handle = start_capture(CaptureConstraints(), fake_capture_factory)
        stop_capture(handle)
        stop_capture(handle)
        stop_capture(None)

        assert not handle.is_active
        assert fake_capture_factory.created[0].released == 1

    def test_capture_after_stop(self, fake_capture_factory):
        handle = start_capture(CaptureConstraints(), fake_capture_factory)
        stop_capture(handle)
        assert capture_frame(handle) is None

    def test_stop_during_read(self, fake_capture_factory):
        """Stopping while a read is in flight discards the frame safely."""
        gate = threading.Event()

        def factory(index):
            return fake_capture_factory(index, read_gate=gate)

        handle = start_capture(CaptureConstraints(), factory)
        capture = fake_capture_factory.created[0]
        results = []
        reader = threading.Thread(target=lambda: results.append(capture_frame(handle)))
        reader.start()
        assert capture.read_started.wait(timeout=5)

        stopper = threading.Thread(target=stop_capture, args=(handle,))
        stopper.start()
        deadline = time.monotonic() + 5
        while handle.is_active and time.monotonic() < deadline:
            time.sleep(0.001)
        gate.set()
        reader.join(timeout=5)
        stopper.join(timeout=5)

        assert results == [None]
        assert capture.released == 1
        assert not handle.is_active
