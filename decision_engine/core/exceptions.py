"""Custom exceptions for the decision engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..engine.types import ExecutionResult


class DecisionEngineError(Exception):
    """Base exception for all decision engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NoStartNodeError(DecisionEngineError):
    """Raised when a workflow definition has no start node."""

    def __init__(self, workflow_id: str) -> None:
        super().__init__(
            message=f"No start nodes found in workflow: {workflow_id}",
            details={"workflow_id": workflow_id},
        )
        self.workflow_id = workflow_id


class UnknownNodeKindError(DecisionEngineError):
    """Raised when a node's kind has no registered handler."""

    def __init__(self, node_id: str, kind: str) -> None:
        super().__init__(
            message=f'Unknown node type: "{kind}"',
            details={"node_id": node_id, "kind": kind},
        )
        self.node_id = node_id
        self.kind = kind


class MissingConfigurationError(DecisionEngineError):
    """Raised when a node is missing its kind-specific descriptor."""

    def __init__(self, node_id: str, kind: str, field: str) -> None:
        label = kind.replace("_", " ").capitalize()
        super().__init__(
            message=f'{label} node "{node_id}" has no {field.replace("_", " ")} defined',
            details={"node_id": node_id, "kind": kind, "field": field},
        )
        self.node_id = node_id
        self.kind = kind
        self.field = field


class TargetNodeNotFoundError(DecisionEngineError):
    """Raised when a connection points at a node id that does not exist."""

    def __init__(self, connection_id: str, target: str) -> None:
        super().__init__(
            message=f"Target node {target} not found",
            details={"connection_id": connection_id, "target": target},
        )
        self.connection_id = connection_id
        self.target = target


class InvalidWorkflowError(DecisionEngineError):
    """Raised when a workflow payload cannot be loaded."""

    def __init__(self, message: str, issues: list[str] | None = None) -> None:
        super().__init__(message=message, details={"issues": issues or []})
        self.issues = issues or []


class NodeTimeoutError(DecisionEngineError):
    """Raised when a node handler runs longer than the configured timeout."""

    def __init__(self, node_id: str, timeout: float) -> None:
        super().__init__(
            message=f'Node "{node_id}" timed out after {timeout:g}s',
            details={"node_id": node_id, "timeout": timeout},
        )
        self.node_id = node_id
        self.timeout = timeout


class MaxDepthExceededError(DecisionEngineError):
    """Raised when a branch goes deeper than the configured limit."""

    def __init__(self, node_id: str, max_depth: int) -> None:
        super().__init__(
            message=(
                f'Execution exceeded maximum depth {max_depth} at node "{node_id}" '
                "(possible cycle)"
            ),
            details={"node_id": node_id, "max_depth": max_depth},
        )
        self.node_id = node_id
        self.max_depth = max_depth


class BranchFailedError(DecisionEngineError):
    """
    Raised by a fan-out point once all of its child branches settled and
    at least one of them failed.

    The results of the children that succeeded travel with the error.
    """

    def __init__(
        self,
        node_id: str,
        errors: list[BaseException],
        partial_results: list[Any],
    ) -> None:
        messages = [str(e) for e in errors]
        super().__init__(
            message="; ".join(messages),
            details={"node_id": node_id, "errors": messages},
        )
        self.node_id = node_id
        self.errors = errors
        self.partial_results = partial_results


class WorkflowInactiveError(DecisionEngineError):
    """Raised when trying to evaluate a retired workflow."""

    def __init__(self, workflow_id: str, status: str) -> None:
        super().__init__(
            message=f"Workflow is not active: {workflow_id} ({status})",
            details={"workflow_id": workflow_id, "status": status},
        )
        self.workflow_id = workflow_id
        self.status = status


class WorkflowExecutionError(DecisionEngineError):
    """Raised on demand when an execution finished with branch failures."""

    def __init__(self, result: ExecutionResult) -> None:
        super().__init__(
            message=(
                f"Workflow {result.workflow_id} finished with "
                f"{len(result.errors)} error(s): {result.outcome.value}"
            ),
            details={
                "workflow_id": result.workflow_id,
                "execution_id": result.execution_id,
                "node_ids": [e.node_id for e in result.errors],
            },
        )
        self.result = result


class ExpressionError(DecisionEngineError):
    """Raised when an embedded expression cannot be evaluated."""

    def __init__(self, expression: str, reason: str) -> None:
        super().__init__(
            message=f"Expression evaluation failed: {reason} (expression: {expression})",
            details={"expression": expression, "reason": reason},
        )
        self.expression = expression
        self.reason = reason
