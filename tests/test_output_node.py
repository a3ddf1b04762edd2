"""
Tests for the output node.

Tests cover:
- Export defaults
- Filename tag resolution with a fixed clock
- Path validation against traversal and the export directory
- Overwrite handling and JPEG flattening
"""

import unittest
from datetime import datetime
from pathlib import Path

import pytest
from PIL import Image

from CVP_Libs.ImageEditingLib.image_models import ImageArtifact
from CVP_Libs.NodesLib.output_node import (
    OutputNodeConfig,
    OutputNodeHandler,
    create_output_node,
    execute_output_node,
)
from CVP_Libs.constants import EXPORT_FILENAME_PATTERN, NODE_TYPE_OUTPUT

FIXED_NOW = datetime(2024, 3, 9, 14, 5, 7)


class TestOutputNodeConfig(unittest.TestCase):
    """Test OutputNodeConfig defaults and kwargs."""

    def test_defaults(self):
        config = OutputNodeConfig()
        self.assertEqual(config.output_path, EXPORT_FILENAME_PATTERN)
        self.assertEqual(config.save_format, "JPEG")
        self.assertEqual(config.quality, 95)
        self.assertFalse(config.overwrite)

    def test_save_kwargs_jpeg(self):
        kwargs = OutputNodeConfig(save_format="jpg", quality=150).get_save_kwargs()
        self.assertEqual(kwargs, {"format": "JPEG", "quality": 100})

    def test_save_kwargs_png_has_no_quality(self):
        self.assertEqual(OutputNodeConfig(save_format="png").get_save_kwargs(), {"format": "PNG"})

    def test_from_dict_ignores_node_keys(self):
        config = OutputNodeConfig.from_dict(create_output_node("out-1", "photo.png"))
        self.assertEqual(config.output_path, "photo.png")


class TestResolveFilename:
    """Tests for tag substitution."""

    def _resolve(self, tmp_path, pattern):
        config = OutputNodeConfig(output_path=pattern, base_directory=str(tmp_path))
        return OutputNodeHandler(config).resolve_filename(now=FIXED_NOW)

    def test_timestamp_is_epoch_millis(self, tmp_path):
        path = self._resolve(tmp_path, EXPORT_FILENAME_PATTERN)
        expected = int(FIXED_NOW.timestamp() * 1000)
        assert path.name == f"professional-cv-photo-{expected}.jpg"
        assert path.parent == tmp_path.resolve()

    def test_date_and_time_defaults(self, tmp_path):
        path = self._resolve(tmp_path, "cv_{DATE}_{TIME}.jpg")
        assert path.name == "cv_2024-03-09_14-05-07.jpg"

    def test_datetime_tag(self, tmp_path):
        assert self._resolve(tmp_path, "{datetime}.png").name == "2024-03-09_14-05-07.png"

    def test_custom_format(self, tmp_path):
        assert self._resolve(tmp_path, "{DATE:%Y%m%d}.jpg").name == "20240309.jpg"

    def test_plain_filename(self, tmp_path):
        assert self._resolve(tmp_path, "photo.jpg") == (tmp_path / "photo.jpg").resolve()


class TestPathValidation:
    """Tests for output path safety."""

    def test_traversal_rejected(self, tmp_path):
        config = OutputNodeConfig(output_path="../escape.jpg", base_directory=str(tmp_path))
        with pytest.raises(ValueError, match="traversal"):
            OutputNodeHandler(config).resolve_filename()

    def test_absolute_path_outside_base_rejected(self, tmp_path):
        outside = tmp_path.parent / "elsewhere.jpg"
        config = OutputNodeConfig(output_path=str(outside), base_directory=str(tmp_path / "exports"))
        with pytest.raises(ValueError, match="outside"):
            OutputNodeHandler(config).resolve_filename()

    def test_subdirectory_allowed(self, tmp_path):
        config = OutputNodeConfig(output_path="cv/photo.jpg", base_directory=str(tmp_path))
        path = OutputNodeHandler(config).resolve_filename()
        assert path == (tmp_path / "cv" / "photo.jpg").resolve()


class TestSaveImage:
    """Tests for writing files."""

    def test_save_creates_directories(self, tmp_path):
        config = OutputNodeConfig(output_path="a/b/photo.png", save_format="PNG",
                                  base_directory=str(tmp_path))
        path = OutputNodeHandler(config).save_image(Image.new("RGB", (10, 10)))
        assert path.is_file()
        assert Image.open(path).format == "PNG"

    def test_existing_file_not_overwritten(self, tmp_path):
        (tmp_path / "photo.jpg").write_bytes(b"keep")
        config = OutputNodeConfig(output_path="photo.jpg", base_directory=str(tmp_path))
        with pytest.raises(ValueError, match="already exists"):
            OutputNodeHandler(config).save_image(Image.new("RGB", (10, 10)))
        assert (tmp_path / "photo.jpg").read_bytes() == b"keep"

    def test_overwrite_allowed(self, tmp_path):
        (tmp_path / "photo.jpg").write_bytes(b"old")
        config = OutputNodeConfig(output_path="photo.jpg", base_directory=str(tmp_path),
                                  overwrite=True)
        path = OutputNodeHandler(config).save_image(Image.new("RGB", (10, 10)))
        assert Image.open(path).format == "JPEG"

    def test_rgba_saved_as_jpeg(self, tmp_path):
        config = OutputNodeConfig(output_path="photo.jpg", base_directory=str(tmp_path))
        path = OutputNodeHandler(config).save_image(Image.new("RGBA", (10, 10), (1, 2, 3, 4)))
        assert Image.open(path).mode == "RGB"

    def test_artifact_input(self, tmp_path):
        artifact = ImageArtifact(Image.new("RGB", (12, 8)), label="template:passport-standard")
        config = OutputNodeConfig(output_path="photo.jpg", base_directory=str(tmp_path))
        path = OutputNodeHandler(config).save_image(artifact)
        assert Image.open(path).size == (12, 8)

    def test_non_image_rejected(self, tmp_path):
        config = OutputNodeConfig(output_path="photo.jpg", base_directory=str(tmp_path))
        with pytest.raises(TypeError):
            OutputNodeHandler(config).save_image("pixels")


class TestExecuteOutputNode:
    """Tests for the node executor."""

    def test_requires_input(self, tmp_path):
        with pytest.raises(ValueError):
            execute_output_node(create_output_node("out-1", base_directory=str(tmp_path)), [])

    def test_executes(self, tmp_path):
        node = create_output_node("out-1", base_directory=str(tmp_path))
        assert node["type"] == NODE_TYPE_OUTPUT

        path = execute_output_node(node, [Image.new("RGB", (10, 10))])
        assert isinstance(path, Path)
        assert path.name.startswith("professional-cv-photo-")
        assert path.suffix == ".jpg"
