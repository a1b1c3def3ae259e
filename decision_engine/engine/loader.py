"""Loading and structural checks of workflow definitions."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from ..core.exceptions import InvalidWorkflowError
from ..schemas.workflow import WorkflowDefinition
from .node_registry import NodeRegistryClass, node_registry, register_all_nodes

logger = logging.getLogger(__name__)


def find_issues(
    definition: WorkflowDefinition, registry: NodeRegistryClass | None = None
) -> list[str]:
    """Structural problems that would surface as run-time errors."""
    registry = registry or register_all_nodes(node_registry)
    issues: list[str] = []
    node_ids = {n.id for n in definition.nodes}

    if not definition.start_nodes():
        issues.append("workflow has no start node")

    for node in definition.nodes:
        if not registry.has(node.kind):
            issues.append(f'node "{node.id}" has unknown kind "{node.kind}"')

    for connection in definition.connections:
        if connection.source not in node_ids:
            issues.append(
                f'connection "{connection.id}" has unknown source "{connection.source}"'
            )
        if connection.target not in node_ids:
            issues.append(
                f'connection "{connection.id}" has unknown target "{connection.target}"'
            )
    return issues


def load_workflow(
    payload: Mapping[str, Any] | WorkflowDefinition, strict: bool = False
) -> WorkflowDefinition:
    """
    Parse a workflow payload.

    Args:
        payload: Raw mapping (snake_case or camelCase keys) or a parsed definition
        strict: Also reject definitions with structural issues

    Raises:
        InvalidWorkflowError: If the payload does not parse, or in strict
            mode when find_issues() reports anything
    """
    if isinstance(payload, WorkflowDefinition):
        definition = payload
    else:
        try:
            definition = WorkflowDefinition.model_validate(dict(payload))
        except ValidationError as e:
            issues = [
                f"{'.'.join(str(p) for p in err['loc']) or 'workflow'}: {err['msg']}"
                for err in e.errors()
            ]
            raise InvalidWorkflowError("Invalid workflow definition", issues) from e

    issues = find_issues(definition)
    if issues:
        if strict:
            raise InvalidWorkflowError(
                f"Workflow {definition.id} has {len(issues)} structural issue(s)", issues
            )
        logger.debug("Workflow %s loaded with issues: %s", definition.id, issues)
    return definition
