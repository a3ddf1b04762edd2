"""
CV Photo Studio Nodes Library.

Stage nodes executed through the node registry. Each node is a plain
dictionary built by a create_* helper and run by the matching execute_*
function.

Modules:
    image_import_node: Upload ingestion
    crop_node: Crop rasterization and optimization
    enhance_node: Background replacement and filter chain
    template_node: Template compositing
    output_node: Export with dynamic naming
"""

from CVP_Libs.NodesLib.image_import_node import (
    create_image_import_node,
    execute_image_import_node,
    get_supported_image_formats,
    guess_mime_type,
)
from CVP_Libs.NodesLib.crop_node import create_crop_node, execute_crop_node
from CVP_Libs.NodesLib.enhance_node import create_enhance_node, execute_enhance_node
from CVP_Libs.NodesLib.template_node import create_template_node, execute_template_node
from CVP_Libs.NodesLib.output_node import (
    OutputNodeConfig,
    OutputNodeHandler,
    create_output_node,
    execute_output_node,
)

__all__ = [
    "create_image_import_node",
    "execute_image_import_node",
    "get_supported_image_formats",
    "guess_mime_type",
    "create_crop_node",
    "execute_crop_node",
    "create_enhance_node",
    "execute_enhance_node",
    "create_template_node",
    "execute_template_node",
    "OutputNodeConfig",
    "OutputNodeHandler",
    "create_output_node",
    "execute_output_node",
]
