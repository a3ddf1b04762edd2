"""
Image Import Node for CV Photo Studio.

Loads an uploaded photo, from raw bytes or from a file on disk, through the
capture source's ingestion checks (MIME type, size limit, decode, EXIF
orientation).

Functions:
    execute_image_import_node: Pipeline executor for image import nodes
    create_image_import_node: Helper to create an import node dictionary
    guess_mime_type: MIME type for a file path
    get_supported_image_formats: File extensions accepted by the file dialog
"""

import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Optional

from CVP_Libs.CaptureLib.capture_source import heif_supported, ingest_file
from CVP_Libs.ImageEditingLib.image_models import ImageArtifact
from CVP_Libs.constants import NODE_TYPE_IMAGE_IMPORT

# Extensions mapped explicitly; mimetypes misses .webp/.heic on some platforms
_EXTENSION_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".heif": "image/heif",
}

STANDARD_IMAGE_FORMATS = {".jpg", ".jpeg", ".png", ".webp"}
HEIF_IMAGE_FORMATS = {".heic", ".heif"}


def get_supported_image_formats() -> List[str]:
    """
    Get list of accepted upload extensions.

    HEIC/HEIF are listed only when a decoder is registered with Pillow.
    """
    formats = set(STANDARD_IMAGE_FORMATS)
    if heif_supported():
        formats.update(HEIF_IMAGE_FORMATS)
    return sorted(formats)


def guess_mime_type(file_path: Path) -> str:
    """MIME type for a file path; empty string when unknown."""
    ext = Path(file_path).suffix.lower()
    if ext in _EXTENSION_MIME_TYPES:
        return _EXTENSION_MIME_TYPES[ext]
    guessed, _ = mimetypes.guess_type(str(file_path))
    return guessed or ""


def execute_image_import_node(node: Dict[str, Any], inputs: List[Any]) -> ImageArtifact:
    """
    Pipeline executor for image import nodes.

    Args:
        node: Node dictionary containing either:
            - 'data': Raw file bytes and 'mime_type': declared MIME type, or
            - 'file_path': Path to an image file ('mime_type' optional)
        inputs: Should be empty list (import nodes have no inputs)

    Returns:
        RGB ImageArtifact

    Raises:
        KeyError: If neither 'data' nor 'file_path' is present
        FileNotFoundError: If file_path does not exist
        UnsupportedFormat / FileTooLarge / ImageDecodeError: From ingestion
    """
    data: Optional[bytes] = node.get("data")
    mime_type = node.get("mime_type")

    if data is None:
        file_path = node.get("file_path")
        if not file_path:
            raise KeyError("Image import node needs 'data' or 'file_path'")
        file_path = Path(file_path)
        if not file_path.is_file():
            raise FileNotFoundError(f"Image file not found: {file_path}")
        data = file_path.read_bytes()
        mime_type = mime_type or guess_mime_type(file_path)

    return ingest_file(data, mime_type or "")


def create_image_import_node(
    node_id: str,
    file_path: Optional[str] = None,
    data: Optional[bytes] = None,
    mime_type: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Helper to create an image import node dictionary.

    Examples:
        >>> create_image_import_node("import-1", file_path="portrait.jpg")
        >>> create_image_import_node("import-2", data=raw, mime_type="image/png")
    """
    node: Dict[str, Any] = {"id": node_id, "type": NODE_TYPE_IMAGE_IMPORT}
    if file_path is not None:
        node["file_path"] = str(file_path)
    if data is not None:
        node["data"] = data
    if mime_type is not None:
        node["mime_type"] = mime_type
    return node
