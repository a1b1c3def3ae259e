"""Pydantic schemas for workflow definitions and execution responses."""

from .workflow import (
    BusinessLogicDescriptor,
    Condition,
    ConditionOperator,
    DataRequirements,
    DataSourceDescriptor,
    NodeConfig,
    NodeKind,
    Position,
    Rule,
    RuleAction,
    ValidationDescriptor,
    WorkflowConnection,
    WorkflowDefinition,
    WorkflowNode,
    WorkflowStatus,
)
from .execution import (
    ExecutionErrorSchema,
    ExecutionLogEntrySchema,
    ExecutionMetricsSchema,
    ExecutionResponse,
)

__all__ = [
    # Workflow
    "BusinessLogicDescriptor",
    "Condition",
    "ConditionOperator",
    "DataRequirements",
    "DataSourceDescriptor",
    "NodeConfig",
    "NodeKind",
    "Position",
    "Rule",
    "RuleAction",
    "ValidationDescriptor",
    "WorkflowConnection",
    "WorkflowDefinition",
    "WorkflowNode",
    "WorkflowStatus",
    # Execution
    "ExecutionErrorSchema",
    "ExecutionLogEntrySchema",
    "ExecutionMetricsSchema",
    "ExecutionResponse",
]
