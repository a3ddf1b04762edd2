"""
Image editing data models for CV Photo Studio.

This module defines core data structures used throughout the photo pipeline.

Classes:
    ImageArtifact: Handle to a decoded raster passed between pipeline stages
    AspectRatio: Named rational width/height ratio
    FilterSettings: Brightness/contrast/saturation/blur adjustments
    PipelineStage: Workflow stage enum

Functions:
    as_artifact: Wrap a bare PIL Image in an ImageArtifact
    get_aspect_ratio: Look up a catalog ratio by name

Constants:
    ASPECT_RATIOS: Catalog of named CV photo ratios
    DEFAULT_FILTERS: Neutral filter settings
    AUTO_ENHANCE: Preset applied by the default enhance step
"""

import math
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from fractions import Fraction
from typing import Any, Dict, Optional, Tuple, Union

from CVP_Libs.constants import (
    ASPECT_RATIO_HEADSHOT,
    ASPECT_RATIO_ID,
    ASPECT_RATIO_LINKEDIN,
    ASPECT_RATIO_PASSPORT,
    ASPECT_RATIO_SQUARE,
    DEFAULT_ASPECT_RATIO_NAME,
    MAX_BLUR_PX,
    MAX_PERCENT,
    MAX_SEPIA_PERCENT,
    MIN_PERCENT,
)
from CVP_Libs.exceptions import ArtifactReleasedError


class PipelineStage(str, Enum):
    CAPTURE = "capture"
    CROP = "crop"
    ENHANCE = "enhance"
    TEMPLATE = "template"
    FINAL = "final"


@dataclass(eq=False)
class ImageArtifact:
    """Handle to decoded pixel data owned by the workflow.

    The artifact is passed between stages by reference. Once released its
    pixels can no longer be read; release is idempotent.

    Attributes:
        image: Decoded PIL Image
        label: Short description of the stage that produced it
        artifact_id: Unique identifier, handy in logs
    """
    image: Any
    label: str = ""
    artifact_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    _released: bool = field(default=False, init=False, repr=False)

    def __post_init__(self):
        if not hasattr(self.image, "size") or not hasattr(self.image, "mode"):
            raise TypeError(f"Expected PIL Image, got {type(self.image)}")
        self._size: Tuple[int, int] = tuple(self.image.size)

    @property
    def width(self) -> int:
        return self._size[0]

    @property
    def height(self) -> int:
        return self._size[1]

    @property
    def size(self) -> Tuple[int, int]:
        return self._size

    @property
    def aspect_ratio(self) -> float:
        return self._size[0] / self._size[1]

    @property
    def is_released(self) -> bool:
        return self._released

    def pixels(self) -> Any:
        """
        Return the underlying PIL Image.

        Raises:
            ArtifactReleasedError: If the artifact was released
        """
        if self._released:
            raise ArtifactReleasedError(
                f"Artifact {self.artifact_id} ({self.label}) was already released"
            )
        return self.image

    def release(self) -> None:
        """Free the pixel buffer. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        self.image.close()


def as_artifact(value: Any, label: str = "") -> ImageArtifact:
    """Return value as an ImageArtifact, wrapping a bare PIL Image."""
    if isinstance(value, ImageArtifact):
        return value
    return ImageArtifact(value, label=label)


@dataclass(frozen=True)
class AspectRatio:
    """Named rational aspect ratio (width / height)."""
    name: str
    width: int
    height: int

    @property
    def fraction(self) -> Fraction:
        return Fraction(self.width, self.height)

    @property
    def value(self) -> float:
        return self.width / self.height

    def __str__(self) -> str:
        return f"{self.name} ({self.width}:{self.height})"


ASPECT_RATIOS: Dict[str, AspectRatio] = {
    "passport": AspectRatio("passport", *ASPECT_RATIO_PASSPORT),
    "square": AspectRatio("square", *ASPECT_RATIO_SQUARE),
    "headshot": AspectRatio("headshot", *ASPECT_RATIO_HEADSHOT),
    "id": AspectRatio("id", *ASPECT_RATIO_ID),
    "linkedin": AspectRatio("linkedin", *ASPECT_RATIO_LINKEDIN),
}

DEFAULT_ASPECT_RATIO = ASPECT_RATIOS[DEFAULT_ASPECT_RATIO_NAME]


def get_aspect_ratio(ratio: Union[str, AspectRatio]) -> AspectRatio:
    """
    Look up an aspect ratio by name.

    Raises:
        KeyError: If the name is not in the catalog
    """
    if isinstance(ratio, AspectRatio):
        return ratio
    key = str(ratio).strip().lower()
    if key not in ASPECT_RATIOS:
        available = ", ".join(sorted(ASPECT_RATIOS))
        raise KeyError(f"Unknown aspect ratio '{ratio}'. Available: {available}")
    return ASPECT_RATIOS[key]


def _check_range(name: str, value: Any, low: float, high: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{name} must be a number, got {type(value)}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")
    if not (low <= value <= high):
        raise ValueError(f"{name} must be {low:g}-{high:g}, got {value}")
    return float(value)


@dataclass(frozen=True)
class FilterSettings:
    """Enhancement filter settings.

    Attributes:
        brightness: Percentage multiplier (0-200, 100 = unchanged)
        contrast: Percentage multiplier (0-200, 100 = unchanged)
        saturation: Percentage multiplier (0-200, 100 = unchanged)
        blur: Gaussian blur radius in pixels (0-20)
        sepia: Optional sepia amount in percent (0-100)
        hue_rotate: Optional hue rotation in degrees
    """
    brightness: float = 100.0
    contrast: float = 100.0
    saturation: float = 100.0
    blur: float = 0.0
    sepia: float = 0.0
    hue_rotate: float = 0.0

    def __post_init__(self):
        _check_range("brightness", self.brightness, MIN_PERCENT, MAX_PERCENT)
        _check_range("contrast", self.contrast, MIN_PERCENT, MAX_PERCENT)
        _check_range("saturation", self.saturation, MIN_PERCENT, MAX_PERCENT)
        _check_range("blur", self.blur, 0.0, MAX_BLUR_PX)
        _check_range("sepia", self.sepia, 0.0, MAX_SEPIA_PERCENT)
        _check_range("hue_rotate", self.hue_rotate, -360.0, 360.0)

    @property
    def is_identity(self) -> bool:
        return self == DEFAULT_FILTERS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FilterSettings":
        """Create from dictionary."""
        filtered = {k: v for k, v in (data or {}).items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


DEFAULT_FILTERS = FilterSettings()
AUTO_ENHANCE = FilterSettings(brightness=105, contrast=108, saturation=95, blur=0)
