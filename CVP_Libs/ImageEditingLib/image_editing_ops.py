"""
Core image editing operations for CV Photo Studio.

This module provides the small raster utilities shared by the stages:
resizing and encoding.

Functions:
    resize_image: Shrink an image to fit a maximum size
    encode_image: Encode an image to JPEG/PNG/WebP bytes
"""

import io
from typing import Any, Tuple

from PIL import Image

from CVP_Libs.GeometryLib.geometry import limit_size
from CVP_Libs.constants import STAGE_JPEG_QUALITY

_FORMAT_ALIASES = {"JPG": "JPEG", "JPEG": "JPEG", "PNG": "PNG", "WEBP": "WEBP"}


def resize_image(image: Any, max_size: Tuple[int, int]) -> Any:
    """
    Shrink an image to fit inside max_size, preserving its ratio.

    Images already inside the bounds are returned as a copy; images are
    never enlarged.

    Args:
        image: A PIL Image
        max_size: (max_width, max_height)

    Returns:
        A new PIL Image
    """
    target = limit_size(image.width, image.height, max_size[0], max_size[1])
    if target == image.size:
        return image.copy()
    return image.resize(target, Image.Resampling.LANCZOS)


def _normalize_format(fmt: str) -> str:
    key = str(fmt).strip().upper()
    if key not in _FORMAT_ALIASES:
        raise ValueError(f"Unsupported output format: {fmt}")
    return _FORMAT_ALIASES[key]


def encode_image(image: Any, fmt: str = "JPEG", quality: int = STAGE_JPEG_QUALITY) -> bytes:
    """
    Encode an image to bytes.

    RGBA input is flattened to RGB for JPEG, which has no alpha channel.

    Raises:
        ValueError: If the format is not JPEG, PNG or WEBP
    """
    fmt = _normalize_format(fmt)
    kwargs = {"format": fmt}
    if fmt in ("JPEG", "WEBP"):
        kwargs["quality"] = max(1, min(100, int(quality)))
    if fmt == "JPEG" and image.mode != "RGB":
        image = image.convert("RGB")

    buffer = io.BytesIO()
    image.save(buffer, **kwargs)
    return buffer.getvalue()

