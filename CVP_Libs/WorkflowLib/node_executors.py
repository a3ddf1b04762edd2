"""
Stage Node Executor Registry.

Maps node types ("Image Import", "Crop", "Enhance", "Template", "Output") to
the functions that run them, so the workflow can execute a stage from a
plain node dictionary.

Classes:
    NodeExecutorRegistry: Registry for node executors

Functions:
    get_default_registry: Get the global default registry (singleton)
    register_default_executors: Register all built-in stage executors
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from CVP_Libs.constants import (
    NODE_TYPE_CROP,
    NODE_TYPE_ENHANCE,
    NODE_TYPE_IMAGE_IMPORT,
    NODE_TYPE_OUTPUT,
    NODE_TYPE_TEMPLATE,
)

logger = logging.getLogger(__name__)

ExecutorFunction = Callable[[Dict[str, Any], List[Any]], Any]


class NodeExecutorRegistry:
    """
    Registry for stage node executors.

    Example:
        >>> registry = NodeExecutorRegistry()
        >>> registry.register("Crop", execute_crop_node, input_count=1)
        >>> cropped = registry.execute("Crop", crop_node, [captured])
    """

    def __init__(self):
        self._executors: Dict[str, ExecutorFunction] = {}
        self._node_metadata: Dict[str, Dict[str, Any]] = {}

    def register(
        self,
        node_type: str,
        executor: ExecutorFunction,
        description: str = "",
        input_count: int = 0,
    ) -> None:
        """
        Register a node executor.

        Args:
            node_type: Unique identifier for the node type (e.g., "Crop")
            executor: Callable accepting (node_dict, inputs)
            description: Human-readable description of the node
            input_count: Inputs the node needs (0 for source nodes)

        Raises:
            ValueError: If node_type is empty or executor is not callable
            RuntimeError: If node_type is already registered
        """
        node_type = str(node_type).strip()
        if not node_type:
            raise ValueError("node_type cannot be empty")
        if not callable(executor):
            raise ValueError(f"executor must be callable, got {type(executor)}")
        if node_type in self._executors:
            raise RuntimeError(f"Node type '{node_type}' is already registered")

        self._executors[node_type] = executor
        self._node_metadata[node_type] = {
            "description": str(description),
            "input_count": int(input_count),
        }
        logger.debug(f"Registered executor for node type: {node_type}")

    def get_executor(self, node_type: str) -> ExecutorFunction:
        """
        Get the executor for a node type.

        Raises:
            KeyError: If node_type is not registered
        """
        node_type = str(node_type).strip()
        if node_type not in self._executors:
            available = ", ".join(self.list_node_types())
            raise KeyError(
                f"No executor registered for node type '{node_type}'. "
                f"Available types: {available}"
            )
        return self._executors[node_type]

    def execute(self, node_type: str, node_dict: Dict[str, Any], inputs: List[Any]) -> Any:
        """
        Execute a node by looking up its executor.

        Raises:
            KeyError: If node_type is not registered
            ValueError: If fewer inputs are given than the node needs
            Exception: Anything the executor raises, unchanged
        """
        executor = self.get_executor(node_type)
        meta = self._node_metadata[str(node_type).strip()]
        if len(inputs) < meta["input_count"]:
            raise ValueError(
                f"{node_type} node needs {meta['input_count']} input(s), got {len(inputs)}"
            )
        logger.debug(f"Executing {node_type} node {node_dict.get('id', '?')}: {meta['description']}")
        return executor(node_dict, inputs)

    def execute_node(self, node_dict: Dict[str, Any], inputs: List[Any]) -> Any:
        """Execute a node dictionary using its own 'type' entry."""
        if "type" not in node_dict:
            raise KeyError("Node dictionary has no 'type'")
        return self.execute(node_dict["type"], node_dict, inputs)

    def list_node_types(self) -> List[str]:
        return sorted(self._executors)


_default_registry: Optional[NodeExecutorRegistry] = None


def get_default_registry() -> NodeExecutorRegistry:
    """
    Get the global default registry (singleton).

    Creates the registry on first call and registers the stage executors.
    """
    global _default_registry

    if _default_registry is None:
        _default_registry = NodeExecutorRegistry()
        register_default_executors(_default_registry)

    return _default_registry


def register_default_executors(registry: NodeExecutorRegistry) -> None:
    """
    Register the five built-in stage executors.

    Args:
        registry: The registry to register executors with
    """
    from CVP_Libs.NodesLib.crop_node import execute_crop_node
    from CVP_Libs.NodesLib.enhance_node import execute_enhance_node
    from CVP_Libs.NodesLib.image_import_node import execute_image_import_node
    from CVP_Libs.NodesLib.output_node import execute_output_node
    from CVP_Libs.NodesLib.template_node import execute_template_node

    registry.register(
        node_type=NODE_TYPE_IMAGE_IMPORT,
        executor=execute_image_import_node,
        description="Ingest an uploaded photo (JPEG, PNG, WebP; HEIC when supported)",
        input_count=0,
    )

    registry.register(
        node_type=NODE_TYPE_CROP,
        executor=execute_crop_node,
        description="Crop to a ratio-locked region with zoom and rotation",
        input_count=1,
    )

    registry.register(
        node_type=NODE_TYPE_ENHANCE,
        executor=execute_enhance_node,
        description="Brightness, contrast, saturation and blur filter chain",
        input_count=1,
    )

    registry.register(
        node_type=NODE_TYPE_TEMPLATE,
        executor=execute_template_node,
        description="Place the subject on a professional background template",
        input_count=1,
    )

    registry.register(
        node_type=NODE_TYPE_OUTPUT,
        executor=execute_output_node,
        description="Export the final photo as a timestamped JPEG",
        input_count=1,
    )

    logger.info("Registered default stage executors")
