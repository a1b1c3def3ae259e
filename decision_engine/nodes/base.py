"""Base node class for all workflow node handlers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, TYPE_CHECKING, TypeVar

from ..core.exceptions import MissingConfigurationError

if TYPE_CHECKING:
    from ..engine.collaborators import Collaborators
    from ..engine.types import ExecutionContext, NodeResult
    from ..schemas.workflow import WorkflowNode

T = TypeVar("T")


class BaseNode(ABC):
    """
    Abstract base class for all node handlers.

    Handlers are stateless; one instance per kind serves every execution.
    """

    display_name: str = ""

    @property
    @abstractmethod
    def kind(self) -> str:
        """Node kind this handler executes."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Short description of what the node does."""
        ...

    @property
    def may_branch(self) -> bool:
        """Whether traversal continues past this node."""
        return True

    @abstractmethod
    async def execute(self, context: ExecutionContext, node: WorkflowNode) -> NodeResult:
        """Execute the node logic."""
        ...

    def require(self, node: WorkflowNode, value: T | None, field: str) -> T:
        """Return a kind-specific descriptor or fail the node."""
        if value is None:
            raise MissingConfigurationError(node.id, self.kind, field)
        return value

    def services(self, context: ExecutionContext) -> Collaborators:
        """Collaborators attached to the running execution."""
        if context.services is None:
            from ..engine.collaborators import Collaborators

            context.services = Collaborators()
        return context.services

    def result(self, payload: dict[str, Any]) -> NodeResult:
        """Helper to create a result tagged with this node's kind."""
        from ..engine.types import NodeResult

        return NodeResult(kind=self.kind, payload=payload)
