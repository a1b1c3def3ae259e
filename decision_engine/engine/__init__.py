"""Core decision engine components."""

from .types import (
    ABSENT,
    BranchFailure,
    DecisionOutcome,
    ExecutionContext,
    ExecutionError,
    ExecutionLogEntry,
    ExecutionMetrics,
    ExecutionResult,
    ExecutionState,
    LogStatus,
    NodeResult,
    NodeState,
    UnknownDescriptor,
)
from .field_resolver import get_path, resolve
from .condition_evaluator import compare, evaluate, evaluate_all
from .expression_engine import ExpressionEngine, expression_engine
from .collaborators import (
    BusinessLogicExecutor,
    Collaborators,
    DataFetcher,
    DefaultBusinessLogicExecutor,
    DefaultDataFetcher,
    DefaultValidator,
    Validator,
)
from .node_registry import NodeRegistryClass, node_registry, register_all_nodes
from .loader import find_issues, load_workflow
from .workflow_executor import WorkflowExecutor

__all__ = [
    "ABSENT",
    "BranchFailure",
    "DecisionOutcome",
    "ExecutionContext",
    "ExecutionError",
    "ExecutionLogEntry",
    "ExecutionMetrics",
    "ExecutionResult",
    "ExecutionState",
    "LogStatus",
    "NodeResult",
    "NodeState",
    "UnknownDescriptor",
    "get_path",
    "resolve",
    "compare",
    "evaluate",
    "evaluate_all",
    "ExpressionEngine",
    "expression_engine",
    "BusinessLogicExecutor",
    "Collaborators",
    "DataFetcher",
    "DefaultBusinessLogicExecutor",
    "DefaultDataFetcher",
    "DefaultValidator",
    "Validator",
    "NodeRegistryClass",
    "node_registry",
    "register_all_nodes",
    "find_issues",
    "load_workflow",
    "WorkflowExecutor",
]
