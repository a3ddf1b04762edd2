"""
Tests for the heuristic background remover.

Tests cover:
- Sobel edge detection
- Centre-weighted subject mask
- Background replacement colour
"""

import numpy as np
import pytest
from PIL import Image

from CVP_Libs.ImageEditingLib.background_removal import (
    remove_background,
    sobel_edges,
    subject_mask,
)


class TestSobelEdges:

    def test_flat_image_has_no_edges(self):
        gray = np.full((20, 20), 128.0)
        assert not sobel_edges(gray).any()

    def test_step_edge_detected(self):
        gray = np.zeros((20, 20))
        gray[:, 10:] = 255
        edges = sobel_edges(gray)
        assert edges[10, 9] == 255 or edges[10, 10] == 255
        assert edges[10, 3] == 0

    def test_border_is_zero(self):
        gray = np.random.default_rng(0).integers(0, 255, (10, 10)).astype(float)
        edges = sobel_edges(gray)
        assert not edges[0].any() and not edges[-1].any()
        assert not edges[:, 0].any() and not edges[:, -1].any()

    def test_tiny_image(self):
        assert sobel_edges(np.zeros((2, 2))).shape == (2, 2)


class TestSubjectMask:

    def test_center_is_subject(self):
        rgb = np.full((100, 100, 3), 200, dtype=np.uint8)
        mask = subject_mask(rgb)
        assert mask[50, 50]
        assert not mask[1, 1]


class TestRemoveBackground:

    def test_corners_replaced_center_kept(self):
        """Flat corners become the background colour; the centre is kept."""
        image = Image.new("RGB", (100, 100), (90, 140, 30))
        out = remove_background(image, "#ffffff")
        assert out.getpixel((1, 1)) == (255, 255, 255)
        assert out.getpixel((50, 50)) == (90, 140, 30)

    def test_custom_color(self):
        image = Image.new("RGB", (60, 60), (10, 10, 10))
        out = remove_background(image, "#ff0000")
        assert out.getpixel((0, 0)) == (255, 0, 0)

    def test_input_not_modified(self):
        image = Image.new("RGB", (40, 40), (10, 10, 10))
        remove_background(image)
        assert image.getpixel((0, 0)) == (10, 10, 10)

    def test_bad_color(self):
        with pytest.raises(ValueError):
            remove_background(Image.new("RGB", (10, 10)), "not-a-colour")
