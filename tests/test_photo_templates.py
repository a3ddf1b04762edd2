"""
Tests for the template catalog and compositor.

Tests cover:
- Catalog contents and lookup
- Canvas size per template ratio
- Solid and gradient backgrounds
- Thin and thick borders
- Failure handling and input immutability
"""

import unittest

import pytest
from PIL import Image

from CVP_Libs.ImageEditingLib.image_models import ASPECT_RATIOS, ImageArtifact
from CVP_Libs.ImageEditingLib.photo_templates import (
    PHOTO_TEMPLATES,
    GradientBackground,
    PhotoTemplate,
    TemplateEffects,
    TemplateFrame,
    apply_template,
    get_template,
    paint_gradient,
    templates_by_category,
)
from CVP_Libs.exceptions import TemplateApplyFailed


def _subject(color=(200, 30, 30), size=(267, 400)):
    return ImageArtifact(Image.new("RGB", size, color), label="enhanced")


class TestCatalog(unittest.TestCase):
    """Test the static template catalog."""

    def test_nine_templates_with_unique_ids(self):
        ids = [t.id for t in PHOTO_TEMPLATES]
        self.assertEqual(len(ids), 9)
        self.assertEqual(len(set(ids)), 9)

    def test_get_template(self):
        template = get_template("government-blue")
        self.assertEqual(template.category, "formal")
        self.assertEqual(template.frame.style, "thick")

    def test_unknown_template(self):
        with self.assertRaises(KeyError):
            get_template("neon-party")

    def test_grouped_by_category(self):
        grouped = templates_by_category()
        self.assertEqual(set(grouped), {"professional", "formal", "modern", "creative"})
        self.assertEqual(sum(len(v) for v in grouped.values()), 9)
        self.assertEqual(grouped["professional"][0].id, "professional-white")

    def test_invalid_frame_style(self):
        with self.assertRaises(ValueError):
            TemplateFrame("dotted")

    def test_gradient_needs_two_colors(self):
        with self.assertRaises(ValueError):
            GradientBackground(("#ffffff",))

    def test_effects_to_filter_settings(self):
        settings = TemplateEffects(lighting="soft", contrast=110, warmth=5).to_filter_settings()
        self.assertEqual(settings.contrast, 110)
        self.assertEqual(settings.sepia, 5)
        self.assertEqual(settings.brightness, 100)

    def test_zero_contrast_is_kept(self):
        """An explicit contrast of 0 is a value, not a missing one."""
        self.assertEqual(TemplateEffects(contrast=0).to_filter_settings().contrast, 0)
        self.assertEqual(TemplateEffects().to_filter_settings().contrast, 100)


class TestCanvasSize:
    """The canvas follows the template ratio with an 800px long edge."""

    @pytest.mark.parametrize("template_id, expected", [
        ("passport-standard", (533, 800)),
        ("artistic-minimal", (600, 800)),
        ("startup-modern", (800, 800)),
        ("linkedin-style", (640, 800)),
    ])
    def test_canvas_size(self, template_id, expected):
        result = apply_template(_subject(), get_template(template_id))
        assert result.size == expected
        assert result.label == f"template:{template_id}"


class TestCompositing:
    """Tests for backgrounds, subject placement and frames."""

    def test_solid_background_and_centred_subject(self):
        result = apply_template(_subject(), get_template("passport-standard"))
        image = result.image
        assert image.getpixel((5, 5)) == (255, 255, 255)
        r, g, b = image.getpixel((image.width // 2, image.height // 2))
        assert r > 180 and g < 60 and b < 60

    def test_thin_border_color(self):
        image = apply_template(_subject(), get_template("professional-gray")).image
        assert image.getpixel((0, 0)) == (0xE9, 0xEC, 0xEF)
        assert image.getpixel((1, 400)) == (0xE9, 0xEC, 0xEF)
        # Background just inside the border
        assert image.getpixel((4, 400)) == (0xF8, 0xF9, 0xFA)

    def test_thick_border_color(self):
        image = apply_template(_subject(), get_template("government-blue")).image
        assert image.getpixel((5, 5)) == (0x19, 0x76, 0xD2)
        assert image.getpixel((12, 12)) == (0xE3, 0xF2, 0xFD)

    def test_shadow_darkens_background(self):
        """The shadow falls below and right of the subject."""
        image = apply_template(_subject(), get_template("corporate-gradient")).image
        plain = apply_template(
            _subject(),
            PhotoTemplate(
                id="plain",
                name="Plain",
                category="modern",
                background=GradientBackground(("#f8f9fa", "#e9ecef")),
                effects=TemplateEffects(contrast=108),
                aspect_ratio=ASPECT_RATIOS["headshot"],
            ),
        ).image
        # Bottom edge of the subject area, just below it
        x, y = image.width // 2, image.height - 40 + 3
        assert sum(image.getpixel((x, y))) < sum(plain.getpixel((x, y)))

    def test_gradient_endpoints(self):
        gradient = paint_gradient((100, 50), ("#000000", "#ffffff"))
        assert gradient.getpixel((0, 0)) == (0, 0, 0)
        assert gradient.getpixel((99, 49))[0] > 240

    def test_transparent_subject_shows_background(self):
        subject = ImageArtifact(Image.new("RGBA", (300, 400), (255, 0, 0, 0)))
        image = apply_template(subject, get_template("passport-standard")).image
        assert image.getpixel((image.width // 2, image.height // 2)) == (255, 255, 255)


class TestFailures:
    """Tests for error handling and immutability."""

    def test_released_artifact_raises(self):
        artifact = _subject()
        artifact.release()
        with pytest.raises(TemplateApplyFailed) as excinfo:
            apply_template(artifact, get_template("linkedin-style"))
        assert excinfo.value.template_id == "linkedin-style"

    def test_input_not_modified(self):
        artifact = _subject()
        before = artifact.image.tobytes()
        apply_template(artifact, get_template("creative-warm"))
        assert artifact.image.tobytes() == before
        assert artifact.size == (267, 400)
