"""Tests for faultline.registry module."""

from __future__ import annotations

import pytest

from faultline.errors import FaultInjectionError, UnknownNodeError
from faultline.registry import NodeRegistry


class TestNodeRegistry:
    """Test the symbolic name table."""

    def test_resolve(self):
        registry = NodeRegistry({"node_1": "node_1@host"})
        assert registry.resolve("node_1") == "node_1@host"

    def test_register_overwrites(self):
        registry = NodeRegistry()
        registry.register("node_1", 100)
        registry.register("node_1", 200)
        assert registry.resolve("node_1") == 200
        assert len(registry) == 1

    def test_unknown_name(self):
        registry = NodeRegistry()
        with pytest.raises(UnknownNodeError, match="Unknown node: node_4"):
            registry.resolve("node_4")

    def test_unknown_name_is_key_error(self):
        """Callers catching KeyError or FaultInjectionError both see it."""
        with pytest.raises(KeyError):
            NodeRegistry().resolve("x")
        with pytest.raises(FaultInjectionError):
            NodeRegistry().resolve("x")

    def test_membership_and_order(self):
        registry = NodeRegistry()
        for name in ("node_2", "node_1"):
            registry.register(name, name.upper())

        assert "node_1" in registry
        assert "node_3" not in registry
        assert registry.names == ["node_2", "node_1"]
        assert list(registry) == ["node_2", "node_1"]

    def test_copies_initial_entries(self):
        entries = {"node_1": "a"}
        registry = NodeRegistry(entries)
        entries["node_2"] = "b"
        assert "node_2" not in registry
