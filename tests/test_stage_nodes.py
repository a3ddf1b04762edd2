"""
Tests for the crop, enhance and template stage nodes.
"""

import pytest
from PIL import Image

from CVP_Libs.GeometryLib.geometry import CropRegion
from CVP_Libs.ImageEditingLib.image_models import FilterSettings, ImageArtifact
from CVP_Libs.NodesLib.crop_node import create_crop_node, execute_crop_node
from CVP_Libs.NodesLib.enhance_node import create_enhance_node, execute_enhance_node
from CVP_Libs.NodesLib.template_node import create_template_node, execute_template_node
from CVP_Libs.constants import NODE_TYPE_CROP, NODE_TYPE_ENHANCE


class TestCropNode:
    """Tests for execute_crop_node."""

    def test_dict_region(self, landscape_artifact):
        node = create_crop_node(
            "crop-1",
            region={"x": 100, "y": 50, "width": 300, "height": 450},
            display_size=(1280, 720),
        )
        assert node["type"] == NODE_TYPE_CROP

        result = execute_crop_node(node, [landscape_artifact])
        assert result.height == 400
        assert result.label == "crop"
        assert not landscape_artifact.is_released

    def test_region_object_and_ratio(self, landscape_artifact):
        node = create_crop_node("crop-1", region=CropRegion(0, 0, 300, 300),
                                aspect_ratio="square")
        assert isinstance(node["region"], dict)
        assert execute_crop_node(node, [landscape_artifact]).size == (400, 400)

    def test_optimize_shrinks(self, landscape_artifact):
        node = create_crop_node("crop-1", region={"x": 0, "y": 0, "width": 300, "height": 300},
                                aspect_ratio="square", max_size=(100, 100))
        assert execute_crop_node(node, [landscape_artifact]).size == (100, 100)

    def test_optimize_off(self, landscape_artifact):
        node = create_crop_node("crop-1", region={"x": 0, "y": 0, "width": 300, "height": 300},
                                aspect_ratio="square", optimize=False, max_size=(100, 100))
        assert execute_crop_node(node, [landscape_artifact]).size == (400, 400)

    def test_bare_image_input(self):
        node = create_crop_node("crop-1", region={"x": 0, "y": 0, "width": 40, "height": 60})
        result = execute_crop_node(node, [Image.new("RGB", (100, 100))])
        assert result.height == 400

    def test_missing_region(self, landscape_artifact):
        with pytest.raises(ValueError):
            execute_crop_node(create_crop_node("crop-1"), [landscape_artifact])

    def test_missing_input(self):
        with pytest.raises(ValueError):
            execute_crop_node(create_crop_node("crop-1", region={"x": 0, "y": 0,
                                                                 "width": 10, "height": 15}), [])


class TestEnhanceNode:
    """Tests for execute_enhance_node."""

    def test_default_is_auto_enhance(self, gray_image):
        node = create_enhance_node("enhance-1")
        assert node["type"] == NODE_TYPE_ENHANCE
        assert node["filters"] is None

        result = execute_enhance_node(node, [ImageArtifact(gray_image)])
        assert 134 <= result.image.getpixel((5, 5))[0] <= 136
        assert result.label == "enhanced"

    def test_dict_filters(self):
        node = create_enhance_node("enhance-1", brightness=200)
        image = Image.new("RGB", (8, 8), (50, 50, 50))
        assert execute_enhance_node(node, [image]).image.getpixel((0, 0)) == (100, 100, 100)

    def test_filter_settings_object(self):
        node = {"filters": FilterSettings(brightness=50)}
        image = Image.new("RGB", (8, 8), (100, 100, 100))
        assert execute_enhance_node(node, [image]).image.getpixel((0, 0)) == (50, 50, 50)

    def test_remove_background_runs_first(self):
        """The replaced background is filtered too."""
        node = create_enhance_node("enhance-1", remove_background=True,
                                   background_color="#646464", brightness=50)
        image = Image.new("RGB", (100, 100), (200, 0, 0))
        result = execute_enhance_node(node, [image]).image
        assert result.getpixel((1, 1)) == (50, 50, 50)
        assert result.getpixel((50, 50)) == (100, 0, 0)

    def test_invalid_filter(self, gray_image):
        with pytest.raises(ValueError):
            execute_enhance_node(create_enhance_node("enhance-1", blur=99), [gray_image])

    def test_missing_input(self):
        with pytest.raises(ValueError):
            execute_enhance_node(create_enhance_node("enhance-1"), [])


class TestTemplateNode:
    """Tests for execute_template_node."""

    def test_applies_template(self):
        subject = ImageArtifact(Image.new("RGB", (267, 400)))
        result = execute_template_node(create_template_node("t-1", "startup-modern"), [subject])
        assert result.size == (800, 800)

    def test_missing_template_id(self):
        with pytest.raises(ValueError):
            execute_template_node({"id": "t-1"}, [Image.new("RGB", (10, 10))])

    def test_unknown_template(self):
        with pytest.raises(KeyError):
            execute_template_node(create_template_node("t-1", "nope"), [Image.new("RGB", (10, 10))])
