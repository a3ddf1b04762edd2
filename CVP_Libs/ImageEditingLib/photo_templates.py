"""
CV Photo Templates and Template Compositor.

A template places the enhanced subject on a professional background:
solid colour or diagonal gradient, subject-only effects, and an optional
frame (thin/thick border or a drop shadow behind the subject).

Layer order on the canvas:
    1. Background (solid fill or gradient)
    2. Shadow rectangle (shadow frame only)
    3. Subject with template effects applied
    4. Border (thin/thick frame only), drawn without effects

Example:
    >>> from PIL import Image
    >>> subject = ImageArtifact(Image.new("RGB", (400, 600), "gray"))
    >>> template = get_template("professional-white")
    >>> result = apply_template(subject, template)
    >>> result.size
    (533, 800)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFilter

from CVP_Libs.GeometryLib.geometry import center_offset, fit_within, template_canvas_size
from CVP_Libs.ImageEditingLib.enhancement_filter import apply_filter_chain
from CVP_Libs.ImageEditingLib.image_models import (
    ASPECT_RATIOS,
    AspectRatio,
    FilterSettings,
    ImageArtifact,
)
from CVP_Libs.constants import (
    DEFAULT_FRAME_COLOR,
    FRAME_THICK_WIDTH,
    FRAME_THIN_WIDTH,
    SHADOW_BLUR,
    SHADOW_COLOR,
    SHADOW_OFFSET,
    TEMPLATE_MAX_EDGE,
    TEMPLATE_PADDING,
)
from CVP_Libs.exceptions import ImageDecodeError, TemplateApplyFailed

logger = logging.getLogger(__name__)

FRAME_STYLES = ("none", "thin", "thick", "shadow")
TEMPLATE_CATEGORIES = ("professional", "formal", "modern", "creative")
LIGHTING_STYLES = ("soft", "studio", "natural")


@dataclass(frozen=True)
class GradientBackground:
    """Linear gradient across the canvas diagonal, stops evenly spaced."""
    colors: Tuple[str, ...]

    def __post_init__(self):
        if len(self.colors) < 2:
            raise ValueError(f"Gradient needs at least 2 colours, got {len(self.colors)}")


Background = Union[str, GradientBackground]


@dataclass(frozen=True)
class TemplateEffects:
    """Subject-only effects.

    Attributes:
        lighting: Descriptive lighting style ('soft', 'studio', 'natural')
        contrast: Contrast percentage (None = unchanged)
        blur: Blur radius in pixels (None = none)
        warmth: Warmth in percent, rendered as sepia (None = none)
    """
    lighting: Optional[str] = None
    contrast: Optional[float] = None
    blur: Optional[float] = None
    warmth: Optional[float] = None

    def to_filter_settings(self) -> FilterSettings:
        """Filter settings equivalent to these effects."""
        return FilterSettings(
            contrast=self.contrast if self.contrast is not None else 100.0,
            blur=self.blur or 0.0,
            sepia=self.warmth or 0.0,
        )


@dataclass(frozen=True)
class TemplateFrame:
    style: str = "none"
    color: Optional[str] = None

    def __post_init__(self):
        if self.style not in FRAME_STYLES:
            raise ValueError(f"frame style must be one of {FRAME_STYLES}, got {self.style!r}")


@dataclass(frozen=True)
class PhotoTemplate:
    """Immutable catalog entry describing a CV photo template."""
    id: str
    name: str
    category: str
    background: Background
    aspect_ratio: AspectRatio
    description: str = ""
    effects: TemplateEffects = field(default_factory=TemplateEffects)
    frame: TemplateFrame = field(default_factory=TemplateFrame)

    def __post_init__(self):
        if self.category not in TEMPLATE_CATEGORIES:
            raise ValueError(f"Unknown template category: {self.category}")


PHOTO_TEMPLATES: List[PhotoTemplate] = [
    PhotoTemplate(
        id="professional-white",
        name="Professional White",
        description="Clean white background for traditional CVs",
        category="professional",
        background="#ffffff",
        effects=TemplateEffects(lighting="studio", contrast=105),
        aspect_ratio=ASPECT_RATIOS["passport"],
    ),
    PhotoTemplate(
        id="professional-gray",
        name="Professional Gray",
        description="Sophisticated gray background",
        category="professional",
        background="#f8f9fa",
        effects=TemplateEffects(lighting="soft", contrast=102),
        frame=TemplateFrame("thin", "#e9ecef"),
        aspect_ratio=ASPECT_RATIOS["passport"],
    ),
    PhotoTemplate(
        id="corporate-gradient",
        name="Corporate Gradient",
        description="Modern gradient for corporate roles",
        category="modern",
        background=GradientBackground(("#f8f9fa", "#e9ecef")),
        effects=TemplateEffects(lighting="studio", contrast=108),
        frame=TemplateFrame("shadow"),
        aspect_ratio=ASPECT_RATIOS["headshot"],
    ),
    PhotoTemplate(
        id="government-blue",
        name="Government Blue",
        description="Traditional blue for official documents",
        category="formal",
        background="#e3f2fd",
        effects=TemplateEffects(lighting="natural", contrast=100),
        frame=TemplateFrame("thick", "#1976d2"),
        aspect_ratio=ASPECT_RATIOS["passport"],
    ),
    PhotoTemplate(
        id="passport-standard",
        name="Passport Standard",
        description="International passport photo standards",
        category="formal",
        background="#ffffff",
        effects=TemplateEffects(lighting="natural", contrast=100),
        aspect_ratio=ASPECT_RATIOS["passport"],
    ),
    PhotoTemplate(
        id="linkedin-style",
        name="LinkedIn Style",
        description="Optimized for professional social media",
        category="modern",
        background=GradientBackground(("#ffffff", "#f0f0f0")),
        effects=TemplateEffects(lighting="soft", contrast=110, warmth=5),
        frame=TemplateFrame("shadow"),
        aspect_ratio=ASPECT_RATIOS["linkedin"],
    ),
    PhotoTemplate(
        id="startup-modern",
        name="Startup Modern",
        description="Contemporary look for tech companies",
        category="modern",
        background=GradientBackground(("#f8f9ff", "#e8f0fe")),
        effects=TemplateEffects(lighting="soft", contrast=112, warmth=3),
        frame=TemplateFrame("thin", "#6366f1"),
        aspect_ratio=ASPECT_RATIOS["square"],
    ),
    PhotoTemplate(
        id="creative-warm",
        name="Creative Warm",
        description="Warm tones for creative industries",
        category="creative",
        background=GradientBackground(("#fef7ed", "#fed7aa")),
        effects=TemplateEffects(lighting="soft", contrast=108, warmth=10),
        frame=TemplateFrame("shadow"),
        aspect_ratio=ASPECT_RATIOS["headshot"],
    ),
    PhotoTemplate(
        id="artistic-minimal",
        name="Artistic Minimal",
        description="Minimal design for creative roles",
        category="creative",
        background=GradientBackground(("#fafafa", "#f5f5f5")),
        effects=TemplateEffects(lighting="studio", contrast=115),
        aspect_ratio=ASPECT_RATIOS["headshot"],
    ),
]

_TEMPLATES_BY_ID: Dict[str, PhotoTemplate] = {t.id: t for t in PHOTO_TEMPLATES}


def get_template(template_id: str) -> PhotoTemplate:
    """
    Look up a template by id.

    Raises:
        KeyError: If no template has that id
    """
    if template_id not in _TEMPLATES_BY_ID:
        available = ", ".join(sorted(_TEMPLATES_BY_ID))
        raise KeyError(f"Unknown template '{template_id}'. Available: {available}")
    return _TEMPLATES_BY_ID[template_id]


def templates_by_category() -> Dict[str, List[PhotoTemplate]]:
    """Group the catalog by category, preserving catalog order."""
    grouped: Dict[str, List[PhotoTemplate]] = {}
    for template in PHOTO_TEMPLATES:
        grouped.setdefault(template.category, []).append(template)
    return grouped


# ============================================================================
# Background painting
# ============================================================================

def _rgb(color: str) -> Tuple[int, int, int]:
    return ImageColor.getrgb(color)[:3]


def paint_gradient(size: Tuple[int, int], colors: Tuple[str, ...]) -> Any:
    """
    Linear gradient from the top-left to the bottom-right corner.

    Each pixel is projected onto the diagonal; stop i sits at
    i / (len(colors) - 1) along it.
    """
    width, height = size
    stops = np.array([_rgb(c) for c in colors], dtype=np.float64)
    positions = np.linspace(0.0, 1.0, len(colors))

    ys, xs = np.mgrid[0:height, 0:width]
    length_sq = float(width * width + height * height)
    t = np.clip((xs * width + ys * height) / length_sq, 0.0, 1.0)

    channels = [np.interp(t, positions, stops[:, c]) for c in range(3)]
    rgb = np.clip(np.rint(np.stack(channels, axis=-1)), 0, 255).astype(np.uint8)
    return Image.fromarray(rgb)


def paint_background(size: Tuple[int, int], background: Background) -> Any:
    """Paint a solid or gradient background into a new RGB canvas."""
    if isinstance(background, GradientBackground):
        return paint_gradient(size, background.colors)
    return Image.new("RGB", size, _rgb(background))


# ============================================================================
# Frame
# ============================================================================

def draw_shadow(canvas: Any, box: Tuple[int, int, int, int]) -> Any:
    """Composite a blurred translucent rectangle, offset from box, onto canvas."""
    dx, dy = SHADOW_OFFSET
    layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    left, top, right, bottom = box
    draw.rectangle((left + dx, top + dy, right + dx - 1, bottom + dy - 1), fill=SHADOW_COLOR)
    layer = layer.filter(ImageFilter.GaussianBlur(radius=SHADOW_BLUR / 2))
    return Image.alpha_composite(canvas.convert("RGBA"), layer).convert("RGB")


def draw_border(canvas: Any, frame: TemplateFrame) -> None:
    """Stroke a thin or thick border along the canvas edge, in place."""
    width = FRAME_THIN_WIDTH if frame.style == "thin" else FRAME_THICK_WIDTH
    draw = ImageDraw.Draw(canvas)
    draw.rectangle(
        (0, 0, canvas.width - 1, canvas.height - 1),
        outline=_rgb(frame.color or DEFAULT_FRAME_COLOR),
        width=width,
    )


# ============================================================================
# Compositor
# ============================================================================

def compose_template(image: Any, template: PhotoTemplate,
                     max_edge: int = TEMPLATE_MAX_EDGE,
                     padding: int = TEMPLATE_PADDING) -> Any:
    """
    Compose a subject image onto a template canvas.

    Args:
        image: Subject PIL Image
        template: Template to apply
        max_edge: Long-edge size of the canvas
        padding: Margin kept around the subject on every side

    Returns:
        New RGB PIL Image sized by the template ratio
    """
    canvas_size = template_canvas_size(template.aspect_ratio.value, max_edge)
    canvas = paint_background(canvas_size, template.background)

    available_w = max(1, canvas_size[0] - 2 * padding)
    available_h = max(1, canvas_size[1] - 2 * padding)
    fit_w, fit_h = fit_within(image.width, image.height, available_w, available_h)
    subject_size = (max(1, round(fit_w)), max(1, round(fit_h)))
    offset = center_offset(canvas_size, subject_size)

    subject = image.convert("RGBA").resize(subject_size, Image.Resampling.LANCZOS)
    settings = template.effects.to_filter_settings()
    if not settings.is_identity:
        subject = apply_filter_chain(subject, settings)

    if template.frame.style == "shadow":
        box = (offset[0], offset[1], offset[0] + subject_size[0], offset[1] + subject_size[1])
        canvas = draw_shadow(canvas, box)

    canvas.paste(subject, offset, subject)

    if template.frame.style in ("thin", "thick"):
        draw_border(canvas, template.frame)

    return canvas


def apply_template(artifact: ImageArtifact, template: PhotoTemplate) -> ImageArtifact:
    """
    Apply a template to an artifact.

    The input artifact is not modified and no partial result is ever
    returned.

    Raises:
        TemplateApplyFailed: If the source cannot be decoded or composed
    """
    try:
        image = artifact.pixels()
        composed = compose_template(image, template)
    except (ImageDecodeError, OSError, ValueError) as e:
        logger.warning(f"Template '{template.id}' failed on artifact {artifact.artifact_id}: {e}")
        raise TemplateApplyFailed(
            f"Failed to apply template '{template.id}': {e}",
            template_id=template.id,
        ) from e

    return ImageArtifact(composed, label=f"template:{template.id}")
