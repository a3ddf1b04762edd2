"""
Tests for the image import node.

Tests cover:
- Importing from raw bytes and from a file path
- Missing inputs and missing files
- MIME type guessing and supported extensions
"""

import unittest
from pathlib import Path

import pytest

from CVP_Libs.NodesLib.image_import_node import (
    create_image_import_node,
    execute_image_import_node,
    get_supported_image_formats,
    guess_mime_type,
)
from CVP_Libs.constants import NODE_TYPE_IMAGE_IMPORT
from CVP_Libs.exceptions import UnsupportedFormat


class TestExecuteImageImportNode:
    """Tests for execute_image_import_node."""

    def test_import_from_bytes(self, jpeg_bytes):
        node = create_image_import_node("import-1", data=jpeg_bytes, mime_type="image/jpeg")
        artifact = execute_image_import_node(node, [])
        assert artifact.size == (400, 300)

    def test_import_from_file(self, tmp_path, png_bytes):
        """The MIME type is guessed from the extension."""
        path = tmp_path / "portrait.PNG"
        path.write_bytes(png_bytes)
        artifact = execute_image_import_node(create_image_import_node("import-1", file_path=path), [])
        assert artifact.size == (300, 400)

    def test_unknown_extension_rejected(self, tmp_path, png_bytes):
        path = tmp_path / "portrait.dat"
        path.write_bytes(png_bytes)
        with pytest.raises(UnsupportedFormat):
            execute_image_import_node(create_image_import_node("import-1", file_path=path), [])

    def test_missing_file(self, tmp_path):
        node = create_image_import_node("import-1", file_path=tmp_path / "nope.jpg")
        with pytest.raises(FileNotFoundError):
            execute_image_import_node(node, [])

    def test_missing_source(self):
        with pytest.raises(KeyError):
            execute_image_import_node(create_image_import_node("import-1"), [])


class TestHelpers(unittest.TestCase):
    """Test MIME guessing and node creation."""

    def test_guess_mime_type(self):
        self.assertEqual(guess_mime_type(Path("a.jpg")), "image/jpeg")
        self.assertEqual(guess_mime_type(Path("a.JPEG")), "image/jpeg")
        self.assertEqual(guess_mime_type(Path("a.webp")), "image/webp")
        self.assertEqual(guess_mime_type(Path("a.heic")), "image/heic")
        self.assertEqual(guess_mime_type(Path("noext")), "")

    def test_supported_formats(self):
        formats = get_supported_image_formats()
        for ext in (".jpg", ".jpeg", ".png", ".webp"):
            self.assertIn(ext, formats)
        self.assertNotIn(".gif", formats)

    def test_create_node(self):
        node = create_image_import_node("import-1", file_path="portrait.jpg")
        self.assertEqual(node["type"], NODE_TYPE_IMAGE_IMPORT)
        self.assertEqual(node["file_path"], "portrait.jpg")
        self.assertNotIn("data", node)
