"""
Pytest configuration and shared fixtures for CV Photo Studio tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import io
import threading

import numpy as np
import pytest
from PIL import Image

from CVP_Libs.ImageEditingLib.image_models import ImageArtifact
from CVP_Libs.config import StudioConfig


class FakeVideoCapture:
    """
    Stand-in for cv2.VideoCapture.

    Delivers solid BGR frames of the requested size. ``opened=False``
    simulates a missing device, ``fail_reads=True`` a stream that stops
    delivering frames. ``read_gate`` (a threading.Event) blocks read()
    until set, to stop the stream while a read is in flight. ``release_event``
    is set once the device has been released.
    """

    def __init__(self, index=0, opened=True, fail_reads=False, read_gate=None,
                 frame_size=(640, 480), bgr=(0, 0, 255)):
        self.index = index
        self.opened = opened
        self.fail_reads = fail_reads
        self.read_gate = read_gate
        self.read_started = threading.Event()
        self.frame_size = frame_size
        self.bgr = bgr
        self.properties = {}
        self.released = 0
        self.release_event = threading.Event()

    def isOpened(self):
        return self.opened

    def set(self, prop, value):
        self.properties[prop] = value
        return True

    def read(self):
        self.read_started.set()
        if self.read_gate is not None:
            self.read_gate.wait(timeout=5)
        if self.fail_reads:
            return False, None
        width, height = self.frame_size
        frame = np.zeros((height, width, 3), dtype=np.uint8)
        frame[...] = self.bgr
        return True, frame

    def release(self):
        self.released += 1
        self.opened = False
        self.release_event.set()


@pytest.fixture
def fake_capture_factory():
    """
    Factory producing FakeVideoCapture objects; the created captures are
    collected on ``factory.created``.
    """
    created = []

    def factory(index=0, **kwargs):
        capture = FakeVideoCapture(index, **kwargs)
        created.append(capture)
        return capture

    factory.created = created
    return factory


@pytest.fixture
def gray_image():
    """Provide a 64x64 mid-gray RGB image."""
    return Image.new("RGB", (64, 64), (128, 128, 128))


@pytest.fixture
def landscape_artifact():
    """Provide a 1280x720 artifact with a red left half and a blue right half."""
    image = Image.new("RGB", (1280, 720), (0, 0, 255))
    image.paste((255, 0, 0), (0, 0, 640, 720))
    return ImageArtifact(image, label="test")


@pytest.fixture
def portrait_artifact():
    """Provide a 600x900 artifact with a light background and a dark centre."""
    image = Image.new("RGB", (600, 900), (230, 230, 230))
    image.paste((40, 40, 40), (200, 250, 400, 650))
    return ImageArtifact(image, label="test")


def encode(image, fmt="JPEG"):
    """Encode a PIL image to bytes in the given format."""
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def jpeg_bytes():
    """Provide a 400x300 JPEG file as bytes."""
    return encode(Image.new("RGB", (400, 300), (200, 120, 80)), "JPEG")


@pytest.fixture
def png_bytes():
    """Provide a 300x400 PNG file as bytes."""
    return encode(Image.new("RGB", (300, 400), (20, 160, 90)), "PNG")


@pytest.fixture
def studio_config(tmp_path):
    """Provide a StudioConfig that exports and stores inside tmp_path."""
    return StudioConfig(
        export_directory=str(tmp_path / "exports"),
        storage_directory=str(tmp_path / "Storage"),
    )


@pytest.fixture
def landscape_jpeg_bytes():
    """Provide a 1280x720 JPEG file with a red left half and a blue right half."""
    image = Image.new("RGB", (1280, 720), (0, 0, 255))
    image.paste((255, 0, 0), (0, 0, 640, 720))
    return encode(image, "JPEG")
