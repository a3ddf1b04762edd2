"""
Enhance Node for CV Photo Studio.

Runs the optional background replacement and then the filter chain. With
no 'filters' entry the auto-enhance preset is used.

Example:
    >>> node = create_enhance_node("enhance-1", brightness=110, contrast=105)
    >>> enhanced = get_default_registry().execute("Enhance", node, [cropped])
"""

from typing import Any, Dict, List

from CVP_Libs.ImageEditingLib.background_removal import remove_background
from CVP_Libs.ImageEditingLib.enhancement_filter import apply_filter_chain
from CVP_Libs.ImageEditingLib.image_models import (
    AUTO_ENHANCE,
    FilterSettings,
    ImageArtifact,
    as_artifact,
)
from CVP_Libs.constants import DEFAULT_BACKGROUND_COLOR, NODE_TYPE_ENHANCE


def execute_enhance_node(node: Dict[str, Any], inputs: List[Any]) -> ImageArtifact:
    """
    Execute enhance node in pipeline.

    Node dict may contain:
        - 'filters': FilterSettings or dict of filter values (default AUTO_ENHANCE)
        - 'remove_background': Replace the background first (default False)
        - 'background_color': Replacement colour (default '#ffffff')

    Inputs:
        - [0]: ImageArtifact (or PIL Image) to enhance

    Returns:
        New ImageArtifact labelled "enhanced"

    Raises:
        ValueError: If no input, or a filter value is out of range
        TypeError: If a filter value is not a number
    """
    if not inputs:
        raise ValueError("Enhance node requires image input")
    source = as_artifact(inputs[0], label="enhance-input")

    filters = node.get("filters")
    if filters is None:
        settings = AUTO_ENHANCE
    elif isinstance(filters, FilterSettings):
        settings = filters
    else:
        settings = FilterSettings.from_dict(filters)

    image = source.pixels()
    if node.get("remove_background", False):
        image = remove_background(image, node.get("background_color", DEFAULT_BACKGROUND_COLOR))

    return ImageArtifact(apply_filter_chain(image, settings), label="enhanced")


def create_enhance_node(
    node_id: str,
    remove_background: bool = False,
    background_color: str = DEFAULT_BACKGROUND_COLOR,
    **filters: Any,
) -> Dict[str, Any]:
    """
    Create enhance node for graph.

    Args:
        node_id: Unique node identifier
        remove_background: Replace non-subject pixels before filtering
        background_color: Replacement colour
        **filters: FilterSettings fields (brightness, contrast, saturation,
            blur, sepia, hue_rotate); none given means auto-enhance
    """
    return {
        "id": node_id,
        "type": NODE_TYPE_ENHANCE,
        "filters": dict(filters) if filters else None,
        "remove_background": remove_background,
        "background_color": background_color,
    }
