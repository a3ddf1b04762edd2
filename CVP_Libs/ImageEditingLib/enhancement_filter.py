"""
Enhancement Filter Operations.

Provides the filter chain used by the enhance stage and the template
effects. Each adjustment follows the CSS Filter Effects formulas so that a
given set of values produces the same output as the reference canvas
renderer:

- Brightness: linear multiply
- Contrast: (c - 0.5) * k + 0.5
- Saturate: luminance-preserving colour matrix
- Sepia: sepia tone colour matrix
- Hue rotate: hue rotation colour matrix
- Blur: Gaussian blur, radius in pixels

The chain is always applied in the fixed order brightness, contrast,
saturate, sepia, hue-rotate, blur. Values are clipped to [0, 1] after
every step.

Example:
    >>> from PIL import Image
    >>> img = Image.new("RGB", (10, 10), (128, 128, 128))
    >>> out = apply_filter_chain(img, AUTO_ENHANCE)
    >>> out.getpixel((0, 0))
    (135, 135, 135)
"""

import math
from typing import Any

import numpy as np
from PIL import Image, ImageFilter

from CVP_Libs.ImageEditingLib.image_models import (
    AUTO_ENHANCE,
    FilterSettings,
    ImageArtifact,
)


# Rec. 709 luminance coefficients used by the CSS colour matrices
_LUMA_R = 0.213
_LUMA_G = 0.715
_LUMA_B = 0.072


# ============================================================================
# Colour matrices
# ============================================================================

def saturate_matrix(amount: float) -> np.ndarray:
    """3x3 saturate matrix; amount 1.0 = unchanged, 0.0 = greyscale."""
    s = amount
    return np.array([
        [_LUMA_R + (1 - _LUMA_R) * s, _LUMA_G - _LUMA_G * s, _LUMA_B - _LUMA_B * s],
        [_LUMA_R - _LUMA_R * s, _LUMA_G + (1 - _LUMA_G) * s, _LUMA_B - _LUMA_B * s],
        [_LUMA_R - _LUMA_R * s, _LUMA_G - _LUMA_G * s, _LUMA_B + (1 - _LUMA_B) * s],
    ])


def sepia_matrix(amount: float) -> np.ndarray:
    """3x3 sepia matrix; amount 0.0 = unchanged, 1.0 = full sepia."""
    inv = 1 - min(1.0, max(0.0, amount))
    return np.array([
        [0.393 + 0.607 * inv, 0.769 - 0.769 * inv, 0.189 - 0.189 * inv],
        [0.349 - 0.349 * inv, 0.686 + 0.314 * inv, 0.168 - 0.168 * inv],
        [0.272 - 0.272 * inv, 0.534 - 0.534 * inv, 0.131 + 0.869 * inv],
    ])


def hue_rotate_matrix(degrees: float) -> np.ndarray:
    """3x3 hue rotation matrix."""
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return np.array([
        [_LUMA_R + c * (1 - _LUMA_R) - s * _LUMA_R,
         _LUMA_G - c * _LUMA_G - s * _LUMA_G,
         _LUMA_B - c * _LUMA_B + s * (1 - _LUMA_B)],
        [_LUMA_R - c * _LUMA_R + s * 0.143,
         _LUMA_G + c * (1 - _LUMA_G) + s * 0.140,
         _LUMA_B - c * _LUMA_B - s * 0.283],
        [_LUMA_R - c * _LUMA_R - s * (1 - _LUMA_R),
         _LUMA_G - c * _LUMA_G + s * _LUMA_G,
         _LUMA_B + c * (1 - _LUMA_B) + s * _LUMA_B],
    ])


# ============================================================================
# Per-step adjustments on float RGB arrays in [0, 1]
# ============================================================================

def adjust_brightness(rgb: np.ndarray, percent: float) -> np.ndarray:
    return np.clip(rgb * (percent / 100.0), 0.0, 1.0)


def adjust_contrast(rgb: np.ndarray, percent: float) -> np.ndarray:
    return np.clip((rgb - 0.5) * (percent / 100.0) + 0.5, 0.0, 1.0)


def _apply_matrix(rgb: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    return np.clip(rgb @ matrix.T, 0.0, 1.0)


def adjust_saturation(rgb: np.ndarray, percent: float) -> np.ndarray:
    return _apply_matrix(rgb, saturate_matrix(percent / 100.0))


def adjust_sepia(rgb: np.ndarray, percent: float) -> np.ndarray:
    return _apply_matrix(rgb, sepia_matrix(percent / 100.0))


def adjust_hue(rgb: np.ndarray, degrees: float) -> np.ndarray:
    return _apply_matrix(rgb, hue_rotate_matrix(degrees))


# ============================================================================
# Filter chain
# ============================================================================

def apply_filter_chain(image: Any, settings: FilterSettings) -> Any:
    """
    Apply the enhancement filter chain to a PIL image.

    Args:
        image: PIL Image (any mode; P/L/RGB/RGBA)
        settings: FilterSettings to apply

    Returns:
        New PIL Image in RGB (or RGBA when the input has alpha)

    Raises:
        TypeError: If image is not a PIL Image
    """
    if not hasattr(image, "convert"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    has_alpha = image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )
    rgba = image.convert("RGBA")
    data = np.asarray(rgba, dtype=np.float64) / 255.0
    rgb = data[..., :3]
    alpha = data[..., 3:]

    if settings.brightness != 100:
        rgb = adjust_brightness(rgb, settings.brightness)
    if settings.contrast != 100:
        rgb = adjust_contrast(rgb, settings.contrast)
    if settings.saturation != 100:
        rgb = adjust_saturation(rgb, settings.saturation)
    if settings.sepia:
        rgb = adjust_sepia(rgb, settings.sepia)
    if settings.hue_rotate:
        rgb = adjust_hue(rgb, settings.hue_rotate)

    out = np.concatenate([rgb, alpha], axis=-1)
    out = np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)
    result = Image.fromarray(out)

    if settings.blur > 0:
        result = result.filter(ImageFilter.GaussianBlur(radius=settings.blur))

    return result if has_alpha else result.convert("RGB")


def apply_filters(artifact: ImageArtifact, settings: FilterSettings) -> ImageArtifact:
    """
    Re-render an artifact through the filter chain.

    The input artifact is not modified.

    Args:
        artifact: Source artifact
        settings: FilterSettings (validated on construction)

    Returns:
        New ImageArtifact labelled "enhanced"

    Raises:
        ArtifactReleasedError: If the artifact was already released
    """
    image = artifact.pixels()
    return ImageArtifact(apply_filter_chain(image, settings), label="enhanced")


def auto_enhance(artifact: ImageArtifact) -> ImageArtifact:
    """Apply the AUTO_ENHANCE preset."""
    return apply_filters(artifact, AUTO_ENHANCE)
