"""Node registry mapping node kinds to their handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..core.exceptions import UnknownNodeKindError

if TYPE_CHECKING:
    from ..nodes.base import BaseNode


@dataclass
class NodeKindInfo:
    """Node kind information for listings."""

    kind: str
    display_name: str
    description: str
    may_branch: bool


class NodeRegistryClass:
    """Registry for node handlers."""

    def __init__(self) -> None:
        self._nodes: dict[str, type[BaseNode]] = {}
        self._instances: dict[str, BaseNode] = {}

    def get(self, kind: str, node_id: str = "") -> BaseNode:
        """
        Get the cached handler for a node kind.

        Handlers are stateless, so one instance serves every execution.

        Raises:
            UnknownNodeKindError: If no handler is registered for the kind
        """
        if kind not in self._instances:
            raise UnknownNodeKindError(node_id, kind)
        return self._instances[kind]

    def has(self, kind: str) -> bool:
        """Check if a node kind is registered."""
        return kind in self._nodes

    def list(self) -> list[str]:
        """List all registered node kinds."""
        return list(self._nodes.keys())

    def get_node_info(self) -> list[NodeKindInfo]:
        """Describe every registered node kind."""
        return [
            NodeKindInfo(
                kind=instance.kind,
                display_name=instance.display_name or instance.kind,
                description=instance.description,
                may_branch=instance.may_branch,
            )
            for instance in self._instances.values()
        ]

    def register(self, node_class: type[BaseNode]) -> None:
        """Register a handler class if its kind is not already registered."""
        instance = node_class()
        if instance.kind not in self._nodes:
            self._nodes[instance.kind] = node_class
            self._instances[instance.kind] = instance


# Singleton instance
node_registry = NodeRegistryClass()


def register_all_nodes(registry: NodeRegistryClass | None = None) -> NodeRegistryClass:
    """Register all built-in node handlers."""
    from ..nodes import (
        StartNode,
        EndNode,
        ConditionNode,
        ActionNode,
        DataSourceNode,
        RuleSetNode,
        DecisionNode,
        ValidationNode,
    )

    registry = registry or node_registry

    all_node_classes: list[type[BaseNode]] = [
        StartNode,
        EndNode,
        ConditionNode,
        ActionNode,
        DataSourceNode,
        RuleSetNode,
        DecisionNode,
        ValidationNode,
    ]

    for node_class in all_node_classes:
        registry.register(node_class)
    return registry
