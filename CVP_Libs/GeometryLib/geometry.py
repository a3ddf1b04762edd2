"""
Geometry engine for the crop and compositing stages.

All functions are pure: they take numbers (or frozen regions) and return new
values without side effects. Inputs are assumed to be validated already.

Coordinates are in pixels with the origin at the top-left corner, x to the
right and y downwards.

Classes:
    CropRegion: Crop rectangle in display pixels plus zoom and rotation
    SourceRect: Integer rectangle in source image pixels

Functions:
    distance: Euclidean distance between two points
    pinch_scale_factor: Zoom factor implied by two successive pinch distances
    clamp_zoom / next_rotation / normalize_rotation: Transform bounds
    clamp_region: Keep a region inside its container
    scale_to_aspect_ratio: Height for a width at a given ratio
    compute_crop_source_rect: Map display-pixel crop to source pixels
    default_region / resize_region: Build or resize ratio-locked regions
    fit_within / center_offset: Contain-fit layout helpers
    crop_output_size / template_canvas_size: Output raster sizes
"""

import math
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from CVP_Libs.constants import (
    CROP_OUTPUT_LONG_EDGE,
    DEFAULT_REGION_WIDTH_FRACTION,
    MAX_ZOOM,
    MIN_CROP_EDGE,
    MIN_ZOOM,
    ROTATION_STEP_DEGREES,
    TEMPLATE_MAX_EDGE,
)

Point = Tuple[float, float]
Size = Tuple[float, float]


@dataclass(frozen=True)
class CropRegion:
    """Crop rectangle relative to the displayed image.

    Attributes:
        x, y: Top-left corner in display pixels
        width, height: Rectangle size in display pixels
        zoom: Magnification applied about the output centre (0.5-3.0)
        rotation_degrees: Clockwise rotation, one of 0/90/180/270
    """
    x: float
    y: float
    width: float
    height: float
    zoom: float = 1.0
    rotation_degrees: int = 0

    @property
    def origin(self) -> Point:
        return (self.x, self.y)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "zoom": self.zoom,
            "rotation_degrees": self.rotation_degrees,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CropRegion":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass(frozen=True)
class SourceRect:
    """Integer rectangle in source image pixels."""
    x: int
    y: int
    width: int
    height: int

    def as_box(self) -> Tuple[int, int, int, int]:
        """Return a PIL crop box (left, upper, right, lower)."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two 2-D points."""
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def pinch_scale_factor(previous_distance: float, current_distance: float) -> float:
    """
    Zoom scale factor for a pinch step.

    Returns 1.0 when the previous distance is zero (coincident pointers),
    since no meaningful ratio exists.
    """
    if previous_distance <= 0:
        return 1.0
    return current_distance / previous_distance


def clamp_zoom(zoom: float) -> float:
    """Clamp a zoom value into [MIN_ZOOM, MAX_ZOOM]."""
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def normalize_rotation(degrees: int) -> int:
    """Wrap a rotation into [0, 360)."""
    return int(degrees) % 360


def next_rotation(degrees: int) -> int:
    """Rotate one step clockwise, wrapping at 360."""
    return normalize_rotation(degrees + ROTATION_STEP_DEGREES)


def point_in_region(point: Point, region: CropRegion) -> bool:
    """True when the point lies inside (or on the edge of) the region."""
    px, py = point
    return region.x <= px <= region.right and region.y <= py <= region.bottom


def clamp_region(region: CropRegion, container_width: float, container_height: float) -> CropRegion:
    """
    Move a region so it lies fully inside the container.

    Width and height are never changed. A region wider (or taller) than the
    container is pinned to the left (or top) edge.
    """
    x = max(0.0, min(region.x, container_width - region.width))
    y = max(0.0, min(region.y, container_height - region.height))
    return replace(region, x=x, y=y)


def scale_to_aspect_ratio(width: float, target_ratio: float) -> float:
    """Height that gives ``width`` the target width/height ratio."""
    return width / target_ratio


def compute_crop_source_rect(region: CropRegion, display_size: Size, natural_size: Size) -> SourceRect:
    """
    Map a crop region in display pixels to source image pixels.

    Every coordinate is scaled by natural/display. A rectangle that would
    extend past the source edge is shrunk about its top-left corner, both
    edges by the same factor, so the region's ratio is kept. Results are
    floored to whole pixels.

    Args:
        region: Crop region in display pixels
        display_size: (width, height) the image is shown at
        natural_size: (width, height) of the decoded source image

    Returns:
        SourceRect inside the natural image bounds
    """
    display_w, display_h = display_size
    natural_w, natural_h = natural_size
    scale_x = natural_w / display_w
    scale_y = natural_h / display_h

    x = max(0, math.floor(region.x * scale_x))
    y = max(0, math.floor(region.y * scale_y))
    width = region.width * scale_x
    height = region.height * scale_y

    avail_w = int(natural_w) - x
    avail_h = int(natural_h) - y
    if width > avail_w or height > avail_h:
        if width * avail_h > height * avail_w:
            height = height * avail_w / width
            width = avail_w
        else:
            width = width * avail_h / height
            height = avail_h

    width = max(1, min(math.floor(width), avail_w))
    height = max(1, min(math.floor(height), avail_h))
    return SourceRect(x=x, y=y, width=width, height=height)


def _fit_ratio_box(max_width: float, max_height: float, ratio: float) -> Size:
    """Largest width/height box with the given ratio inside max_width x max_height."""
    width = max_width
    height = scale_to_aspect_ratio(width, ratio)
    if height > max_height:
        height = max_height
        width = height * ratio
    return (width, height)


def default_region(container_width: float, container_height: float, ratio: float) -> CropRegion:
    """
    Default crop region: 80% of the container width at the given ratio, centred.

    When the container is too short for that height the region shrinks to
    80% of the container height instead.
    """
    width, height = _fit_ratio_box(
        container_width * DEFAULT_REGION_WIDTH_FRACTION,
        container_height * DEFAULT_REGION_WIDTH_FRACTION,
        ratio,
    )
    return CropRegion(
        x=(container_width - width) / 2,
        y=(container_height - height) / 2,
        width=width,
        height=height,
    )


def resize_region(
    region: CropRegion,
    width: float,
    container_width: float,
    container_height: float,
    ratio: float,
    height: Optional[float] = None,
    free_form: bool = False,
) -> CropRegion:
    """
    Resize a region keeping its top-left corner where possible.

    With free_form disabled the height is derived from the ratio and any
    explicit height is ignored. The result is capped to the container,
    kept at least MIN_CROP_EDGE (or the container size when smaller) and
    clamped inside the container.
    """
    min_edge_w = min(MIN_CROP_EDGE, container_width)
    min_edge_h = min(MIN_CROP_EDGE, container_height)

    if free_form:
        new_w = max(min_edge_w, min(width, container_width))
        new_h = height if height is not None else region.height
        new_h = max(min_edge_h, min(new_h, container_height))
    else:
        new_w = max(min_edge_w, min(width, container_width))
        new_w, new_h = _fit_ratio_box(new_w, container_height, ratio)

    resized = replace(region, width=new_w, height=new_h)
    return clamp_region(resized, container_width, container_height)


def fit_within(source_width: float, source_height: float, max_width: float, max_height: float) -> Size:
    """Contain-fit a source size into a box, preserving its ratio."""
    source_ratio = source_width / source_height
    box_ratio = max_width / max_height
    if source_ratio > box_ratio:
        return (max_width, max_width / source_ratio)
    return (max_height * source_ratio, max_height)


def center_offset(outer: Size, inner: Size) -> Tuple[int, int]:
    """Integer top-left offset that centres ``inner`` inside ``outer``."""
    return (int((outer[0] - inner[0]) // 2), int((outer[1] - inner[1]) // 2))


def _long_edge_size(ratio: float, long_edge: int) -> Tuple[int, int]:
    if ratio >= 1:
        return (long_edge, max(1, round(long_edge / ratio)))
    return (max(1, round(long_edge * ratio)), long_edge)


def crop_output_size(ratio: float, long_edge: int = CROP_OUTPUT_LONG_EDGE) -> Tuple[int, int]:
    """Output raster size for a crop: ``long_edge`` px on the long side."""
    return _long_edge_size(ratio, long_edge)


def template_canvas_size(ratio: float, max_edge: int = TEMPLATE_MAX_EDGE) -> Tuple[int, int]:
    """Template canvas size bounded by ``max_edge`` on the long side."""
    return _long_edge_size(ratio, max_edge)


def limit_size(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """
    Shrink (never enlarge) a size to fit max_width x max_height.

    Width is limited first, then height.
    """
    w, h = float(width), float(height)
    if w > max_width:
        h = h * max_width / w
        w = max_width
    if h > max_height:
        w = w * max_height / h
        h = max_height
    return (max(1, round(w)), max(1, round(h)))
