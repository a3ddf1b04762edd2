"""
WorkflowLib - Stage orchestration

The node executor registry and the photo workflow state machine that drives
the stages through it.
"""

from CVP_Libs.WorkflowLib.node_executors import (
    NodeExecutorRegistry,
    get_default_registry,
    register_default_executors,
)
from CVP_Libs.WorkflowLib.photo_workflow import (
    ARTIFACT_STAGES,
    Notice,
    PhotoWorkflow,
)

__all__ = [
    "NodeExecutorRegistry",
    "get_default_registry",
    "register_default_executors",
    "ARTIFACT_STAGES",
    "Notice",
    "PhotoWorkflow",
]
