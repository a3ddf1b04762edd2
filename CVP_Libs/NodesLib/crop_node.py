"""
Crop Node for CV Photo Studio.

Wraps the crop rasterization for execution through the node registry and
optimizes the result to at most 800x1200.

Example:
    >>> node = create_crop_node(
    ...     "crop-1",
    ...     region={"x": 100, "y": 50, "width": 300, "height": 450},
    ...     display_size=(1280, 720),
    ...     aspect_ratio="passport",
    ... )
    >>> registry = get_default_registry()
    >>> cropped = registry.execute("Crop", node, [captured])
"""

from typing import Any, Dict, List, Optional, Tuple

from CVP_Libs.CropLib.crop_controller import apply_crop
from CVP_Libs.GeometryLib.geometry import CropRegion
from CVP_Libs.ImageEditingLib.image_editing_ops import resize_image
from CVP_Libs.ImageEditingLib.image_models import ImageArtifact, as_artifact
from CVP_Libs.constants import DEFAULT_ASPECT_RATIO_NAME, NODE_TYPE_CROP, OPTIMIZED_MAX_SIZE


def execute_crop_node(node: Dict[str, Any], inputs: List[Any]) -> ImageArtifact:
    """
    Execute crop node in pipeline.

    Node dict should contain:
        - 'region': CropRegion or dict with x/y/width/height/zoom/rotation_degrees
        - 'display_size': (width, height) the source is displayed at
          (default: the source's own size)
        - 'aspect_ratio': Ratio name (default 'passport')
        - 'optimize': Shrink the result to 'max_size' (default True)
        - 'max_size': (max_width, max_height) (default 800x1200)

    Inputs:
        - [0]: ImageArtifact (or PIL Image) to crop

    Returns:
        New ImageArtifact

    Raises:
        ValueError: If no input or no region
    """
    if not inputs:
        raise ValueError("Crop node requires image input")
    source = as_artifact(inputs[0], label="crop-input")

    region = node.get("region")
    if region is None:
        raise ValueError("Crop node missing required 'region'")
    if not isinstance(region, CropRegion):
        region = CropRegion.from_dict(region)

    display_size: Tuple[float, float] = tuple(node.get("display_size") or source.size)
    cropped = apply_crop(source, region, display_size, node.get("aspect_ratio", DEFAULT_ASPECT_RATIO_NAME))

    if not node.get("optimize", True):
        return cropped

    max_size = tuple(node.get("max_size", OPTIMIZED_MAX_SIZE))
    optimized = resize_image(cropped.pixels(), max_size)
    cropped.release()
    return ImageArtifact(optimized, label="crop")


def create_crop_node(
    node_id: str,
    region: Optional[Dict[str, Any]] = None,
    display_size: Optional[Tuple[float, float]] = None,
    aspect_ratio: str = DEFAULT_ASPECT_RATIO_NAME,
    optimize: bool = True,
    max_size: Tuple[int, int] = OPTIMIZED_MAX_SIZE,
) -> Dict[str, Any]:
    """Create crop node for graph."""
    if isinstance(region, CropRegion):
        region = region.to_dict()
    return {
        "id": node_id,
        "type": NODE_TYPE_CROP,
        "region": region,
        "display_size": display_size,
        "aspect_ratio": aspect_ratio,
        "optimize": optimize,
        "max_size": max_size,
    }
