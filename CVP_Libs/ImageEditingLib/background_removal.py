"""
Heuristic background replacement.

Placeholder segmentation that assumes the subject sits in the middle of the
frame: a pixel is kept when it is close enough to the centre or lies on a
strong Sobel edge, every other pixel is painted with the background colour.
This is not a segmentation model and is kept intentionally simple.

Functions:
    sobel_edges: Binary edge map from a greyscale array
    subject_mask: Boolean mask of pixels treated as subject
    remove_background: Replace non-subject pixels of an image
"""

from typing import Any, Tuple

import numpy as np
from PIL import Image, ImageColor

from CVP_Libs.constants import (
    BG_CENTER_WEIGHT_THRESHOLD,
    BG_EDGE_THRESHOLD,
    BG_EDGE_WEIGHT_THRESHOLD,
    DEFAULT_BACKGROUND_COLOR,
)


def sobel_edges(gray: np.ndarray, threshold: float = BG_EDGE_THRESHOLD) -> np.ndarray:
    """
    Binary edge map (0 or 255) using the 3x3 Sobel operator.

    The one-pixel border is always 0.
    """
    height, width = gray.shape
    edges = np.zeros((height, width), dtype=np.uint8)
    if height < 3 or width < 3:
        return edges

    g = gray.astype(np.float64)
    tl, tc, tr = g[:-2, :-2], g[:-2, 1:-1], g[:-2, 2:]
    ml, mr = g[1:-1, :-2], g[1:-1, 2:]
    bl, bc, br = g[2:, :-2], g[2:, 1:-1], g[2:, 2:]

    gx = (tr - tl) + 2 * (mr - ml) + (br - bl)
    gy = (bl + 2 * bc + br) - (tl + 2 * tc + tr)
    magnitude = np.sqrt(gx * gx + gy * gy)

    edges[1:-1, 1:-1] = np.where(magnitude > threshold, 255, 0)
    return edges


def subject_mask(rgb: np.ndarray, edge_threshold: float = BG_EDGE_THRESHOLD) -> np.ndarray:
    """
    Boolean mask of subject pixels for an HxWx3 uint8 array.

    A pixel is subject when its centre weight (1 - distance / max distance)
    exceeds 0.3 or its edge weight exceeds 0.5.
    """
    height, width = rgb.shape[:2]
    gray = rgb[..., :3].astype(np.float64).mean(axis=-1)
    edges = sobel_edges(gray, edge_threshold)

    center_x, center_y = width / 2, height / 2
    max_distance = float(np.hypot(center_x, center_y)) or 1.0
    ys, xs = np.mgrid[0:height, 0:width]
    center_weight = 1 - np.hypot(xs - center_x, ys - center_y) / max_distance
    edge_weight = edges / 255.0

    return (center_weight > BG_CENTER_WEIGHT_THRESHOLD) | (edge_weight > BG_EDGE_WEIGHT_THRESHOLD)


def remove_background(
    image: Any,
    background_color: str = DEFAULT_BACKGROUND_COLOR,
    edge_threshold: float = BG_EDGE_THRESHOLD,
) -> Any:
    """
    Replace pixels outside the heuristic subject mask with a flat colour.

    Args:
        image: PIL Image
        background_color: Any PIL colour string, e.g. "#ffffff"
        edge_threshold: Sobel magnitude above which a pixel counts as edge

    Returns:
        New RGB PIL Image

    Raises:
        TypeError: If image is not a PIL Image
        ValueError: If background_color cannot be parsed
    """
    if not hasattr(image, "convert"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    fill: Tuple[int, ...] = ImageColor.getrgb(background_color)[:3]
    rgb = np.array(image.convert("RGB"), dtype=np.uint8)
    mask = subject_mask(rgb, edge_threshold)
    rgb[~mask] = fill
    return Image.fromarray(rgb)
