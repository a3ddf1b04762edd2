"""
Template Node for CV Photo Studio.

Places the enhanced subject on a catalog template.
"""

from typing import Any, Dict, List

from CVP_Libs.ImageEditingLib.image_models import ImageArtifact, as_artifact
from CVP_Libs.ImageEditingLib.photo_templates import apply_template, get_template
from CVP_Libs.constants import NODE_TYPE_TEMPLATE


def execute_template_node(node: Dict[str, Any], inputs: List[Any]) -> ImageArtifact:
    """
    Execute template node in pipeline.

    Node dict should contain:
        - 'template_id': Catalog template id (required)

    Raises:
        ValueError: If no input or no template id
        KeyError: If the template id is unknown
        TemplateApplyFailed: If compositing fails
    """
    if not inputs:
        raise ValueError("Template node requires image input")

    template_id = node.get("template_id")
    if not template_id:
        raise ValueError("Template node missing required 'template_id'")

    return apply_template(as_artifact(inputs[0], label="template-input"), get_template(template_id))


def create_template_node(node_id: str, template_id: str) -> Dict[str, Any]:
    """Create template node for graph."""
    return {
        "id": node_id,
        "type": NODE_TYPE_TEMPLATE,
        "template_id": template_id,
    }
