"""
GeometryLib - Pure geometry for cropping and compositing

This module provides the region types and the numeric helpers shared by
the crop controller and the template compositor.
"""

from CVP_Libs.GeometryLib.geometry import (
    CropRegion,
    SourceRect,
    distance,
    pinch_scale_factor,
    clamp_zoom,
    normalize_rotation,
    next_rotation,
    point_in_region,
    clamp_region,
    scale_to_aspect_ratio,
    compute_crop_source_rect,
    default_region,
    resize_region,
    fit_within,
    center_offset,
    crop_output_size,
    template_canvas_size,
    limit_size,
)

__all__ = [
    "CropRegion",
    "SourceRect",
    "distance",
    "pinch_scale_factor",
    "clamp_zoom",
    "normalize_rotation",
    "next_rotation",
    "point_in_region",
    "clamp_region",
    "scale_to_aspect_ratio",
    "compute_crop_source_rect",
    "default_region",
    "resize_region",
    "fit_within",
    "center_offset",
    "crop_output_size",
    "template_canvas_size",
    "limit_size",
]
