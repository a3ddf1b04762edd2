"""
Tests for the stage node executor registry.

Tests cover:
- Registration and duplicates
- Lookup errors
- Executing a node dictionary by its type
- Input count checks
- The default registry's built-in stages
"""

import unittest

import pytest
from PIL import Image

from CVP_Libs.WorkflowLib.node_executors import (
    NodeExecutorRegistry,
    get_default_registry,
)
from CVP_Libs.NodesLib.template_node import create_template_node
from CVP_Libs.ImageEditingLib.image_models import ImageArtifact


def _echo(node, inputs):
    return (node.get("id"), list(inputs))


class TestNodeExecutorRegistry(unittest.TestCase):
    """Test NodeExecutorRegistry behaviour."""

    def setUp(self):
        self.registry = NodeExecutorRegistry()

    def test_register_and_execute(self):
        self.registry.register("Echo", _echo, description="echo", input_count=1)
        self.assertEqual(self.registry.list_node_types(), ["Echo"])
        self.assertEqual(self.registry.execute("Echo", {"id": "n1"}, [1]), ("n1", [1]))

    def test_names_are_stripped(self):
        self.registry.register("  Echo  ", _echo)
        self.assertIs(self.registry.get_executor("Echo"), _echo)

    def test_duplicate_registration(self):
        self.registry.register("Echo", _echo)
        with self.assertRaises(RuntimeError):
            self.registry.register("Echo", _echo)

    def test_invalid_registration(self):
        with self.assertRaises(ValueError):
            self.registry.register("", _echo)
        with self.assertRaises(ValueError):
            self.registry.register("Echo", "not callable")

    def test_unknown_type(self):
        self.registry.register("Echo", _echo)
        with self.assertRaises(KeyError) as ctx:
            self.registry.get_executor("Missing")
        self.assertIn("Echo", str(ctx.exception))

    def test_execute_node_uses_type(self):
        self.registry.register("Echo", _echo)
        self.assertEqual(self.registry.execute_node({"id": "n2", "type": "Echo"}, []), ("n2", []))
        with self.assertRaises(KeyError):
            self.registry.execute_node({"id": "n3"}, [])

    def test_too_few_inputs(self):
        self.registry.register("Pair", _echo, input_count=2)
        with self.assertRaises(ValueError):
            self.registry.execute("Pair", {"id": "n4"}, [1])
        self.assertEqual(self.registry.execute("Pair", {"id": "n4"}, [1, 2]), ("n4", [1, 2]))


class TestDefaultRegistry:
    """Tests for the singleton default registry."""

    def test_singleton(self):
        assert get_default_registry() is get_default_registry()

    def test_five_stage_types(self):
        types = get_default_registry().list_node_types()
        assert types == sorted(["Image Import", "Crop", "Enhance", "Template", "Output"])

    @pytest.mark.parametrize("node_type", ["Crop", "Enhance", "Template", "Output"])
    def test_stage_without_input_rejected(self, node_type):
        with pytest.raises(ValueError):
            get_default_registry().execute(node_type, {"id": "n"}, [])

    def test_executes_template_node(self):
        subject = ImageArtifact(Image.new("RGB", (200, 300), (90, 90, 90)))
        result = get_default_registry().execute_node(
            create_template_node("template-1", "passport-standard"), [subject]
        )
        assert result.size == (533, 800)
