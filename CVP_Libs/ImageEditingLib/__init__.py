"""
ImageEditingLib - Raster operations for the CV photo pipeline

This module provides the data models, enhancement filters, background
heuristic, raster utilities and template compositor used by the stages.
"""

from CVP_Libs.ImageEditingLib.image_models import (
    ASPECT_RATIOS,
    AUTO_ENHANCE,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_FILTERS,
    AspectRatio,
    FilterSettings,
    ImageArtifact,
    as_artifact,
    PipelineStage,
    get_aspect_ratio,
)
from CVP_Libs.ImageEditingLib.enhancement_filter import (
    apply_filter_chain,
    apply_filters,
    auto_enhance,
)
from CVP_Libs.ImageEditingLib.background_removal import remove_background
from CVP_Libs.ImageEditingLib.image_editing_ops import (
    encode_image,
    resize_image,
)
from CVP_Libs.ImageEditingLib.photo_templates import (
    PHOTO_TEMPLATES,
    GradientBackground,
    PhotoTemplate,
    TemplateEffects,
    TemplateFrame,
    apply_template,
    get_template,
    templates_by_category,
)

__all__ = [
    "ASPECT_RATIOS",
    "AUTO_ENHANCE",
    "DEFAULT_ASPECT_RATIO",
    "DEFAULT_FILTERS",
    "AspectRatio",
    "FilterSettings",
    "ImageArtifact",
    "as_artifact",
    "PipelineStage",
    "get_aspect_ratio",
    "apply_filter_chain",
    "apply_filters",
    "auto_enhance",
    "remove_background",
    "encode_image",
    "resize_image",
    "PHOTO_TEMPLATES",
    "GradientBackground",
    "PhotoTemplate",
    "TemplateEffects",
    "TemplateFrame",
    "apply_template",
    "get_template",
    "templates_by_category",
]
