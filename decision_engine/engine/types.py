"""Core type definitions for the decision engine."""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .collaborators import Collaborators


class Absent:
    """Marker for a field path that does not resolve. Distinct from None."""

    _instance: Absent | None = None

    def __new__(cls) -> Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = Absent()


@dataclass(frozen=True)
class UnknownDescriptor:
    """Result of a descriptor whose type no collaborator recognizes."""

    descriptor_type: str

    def to_dict(self) -> dict[str, Any]:
        return {"unknown": True, "type": self.descriptor_type}


class ExecutionState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# Node states share the same vocabulary as executions
NodeState = ExecutionState


class LogStatus(str, Enum):
    STARTED = "started"
    COMPLETED = "completed"
    ERROR = "error"


class DecisionOutcome(str, Enum):
    """How much of a workflow produced a decision."""

    DECISIONED = "decisioned"
    PARTIALLY_DECISIONED = "partially_decisioned"
    NOT_DECISIONED = "not_decisioned"


@dataclass
class NodeResult:
    """Kind-tagged payload produced by a node handler."""

    kind: str
    payload: dict[str, Any]
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            **{k: to_jsonable(v) for k, v in self.payload.items()},
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class BranchFailure:
    """Placeholder for a start branch that failed, keeping what it did produce."""

    node_id: str
    error: str
    partial_results: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "failed": True,
            "nodeId": self.node_id,
            "error": self.error,
            "partialResults": to_jsonable(self.partial_results),
        }


@dataclass
class ExecutionError:
    """Error that occurred during execution."""

    node_id: str
    error: str
    timestamp: datetime
    kind: str | None = None


@dataclass
class ExecutionLogEntry:
    """One append-only entry in the execution log."""

    node_id: str
    node_kind: str
    node_label: str
    timestamp: datetime
    status: LogStatus
    result: NodeResult | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "nodeId": self.node_id,
            "nodeType": self.node_kind,
            "nodeLabel": self.node_label,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
        }
        if self.result is not None:
            entry["result"] = self.result.to_dict()
        if self.error is not None:
            entry["error"] = self.error
        return entry


@dataclass
class ExecutionMetrics:
    """Wall-clock timings in milliseconds."""

    total_execution_time: float = 0.0
    node_execution_times: dict[str, float] = field(default_factory=dict)
    data_source_response_times: dict[str, float] = field(default_factory=dict)


@dataclass
class ExecutionContext:
    """
    Mutable state of one workflow evaluation.

    Owned by a single `execute` call. Every write that concurrent branches
    can make goes through the async methods below, which hold `lock`.
    """

    execution_id: str
    workflow_id: str
    input_data: dict[str, Any] = field(default_factory=dict)
    execution_state: ExecutionState = ExecutionState.PENDING
    start_time: datetime = field(default_factory=datetime.now)

    output_data: dict[str, Any] = field(default_factory=dict)
    node_results: dict[str, NodeResult] = field(default_factory=dict)
    node_states: dict[str, NodeState] = field(default_factory=dict)
    errors: list[ExecutionError] = field(default_factory=list)
    execution_log: list[ExecutionLogEntry] = field(default_factory=list)
    metrics: ExecutionMetrics = field(default_factory=ExecutionMetrics)

    # Set by the executor for the duration of one call
    services: Collaborators | None = None
    http_client: Any | None = None  # httpx.AsyncClient

    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def __post_init__(self) -> None:
        # Handlers read from a private snapshot of the application payload
        self.input_data = copy.deepcopy(self.input_data)

    async def merge_output(self, data: dict[str, Any]) -> None:
        """Merge fetched data into the output map. Last write wins per key."""
        async with self.lock:
            self.output_data = {**self.output_data, **data}

    async def set_node_state(self, node_id: str, state: NodeState) -> None:
        async with self.lock:
            self.node_states[node_id] = state

    async def record_result(self, node_id: str, result: NodeResult, elapsed_ms: float) -> None:
        async with self.lock:
            self.node_results[node_id] = result
            self.node_states[node_id] = NodeState.COMPLETED
            self.metrics.node_execution_times[node_id] = elapsed_ms

    async def record_error(
        self,
        node_id: str,
        error: BaseException,
        elapsed_ms: float | None = None,
        update_state: bool = True,
    ) -> None:
        async with self.lock:
            self.errors.append(
                ExecutionError(
                    node_id=node_id,
                    error=str(error) or type(error).__name__,
                    timestamp=datetime.now(),
                    kind=type(error).__name__,
                )
            )
            if update_state:
                self.node_states[node_id] = NodeState.FAILED
            if elapsed_ms is not None:
                self.metrics.node_execution_times[node_id] = elapsed_ms

    async def record_response_time(self, node_id: str, elapsed_ms: float) -> None:
        async with self.lock:
            self.metrics.data_source_response_times[node_id] = elapsed_ms

    async def append_log(self, entry: ExecutionLogEntry) -> None:
        async with self.lock:
            self.execution_log.append(entry)

    def scope(self) -> dict[str, Any]:
        """Keyed view of the context used for field resolution."""
        return {
            "executionId": self.execution_id,
            "workflowId": self.workflow_id,
            "inputData": self.input_data,
            "outputData": self.output_data,
            "nodeResults": {k: v.payload for k, v in self.node_results.items()},
        }


@dataclass
class ExecutionResult:
    """What `execute` hands back to its caller."""

    results: list[Any]
    execution_log: list[ExecutionLogEntry]
    status: str
    timestamp: datetime
    execution_id: str
    workflow_id: str
    errors: list[ExecutionError] = field(default_factory=list)
    metrics: ExecutionMetrics = field(default_factory=ExecutionMetrics)

    @property
    def outcome(self) -> DecisionOutcome:
        if not self.errors:
            return DecisionOutcome.DECISIONED
        if any(_has_output(r) for r in self.results):
            return DecisionOutcome.PARTIALLY_DECISIONED
        return DecisionOutcome.NOT_DECISIONED

    def leaf_results(self) -> list[NodeResult]:
        """Terminal node results of every branch, flattened in traversal order."""
        leaves: list[NodeResult] = []
        _collect_leaves(self.results, leaves)
        return leaves

    def raise_for_errors(self) -> ExecutionResult:
        """Raise WorkflowExecutionError if any branch failed."""
        if self.errors:
            from ..core.exceptions import WorkflowExecutionError

            raise WorkflowExecutionError(self)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "executionId": self.execution_id,
            "workflowId": self.workflow_id,
            "results": to_jsonable(self.results),
            "executionLog": [entry.to_dict() for entry in self.execution_log],
            "status": self.status,
            "outcome": self.outcome.value,
            "timestamp": self.timestamp.isoformat(),
            "errors": [
                {
                    "nodeId": e.node_id,
                    "error": e.error,
                    "kind": e.kind,
                    "timestamp": e.timestamp.isoformat(),
                }
                for e in self.errors
            ],
            "metrics": {
                "totalExecutionTime": self.metrics.total_execution_time,
                "nodeExecutionTimes": dict(self.metrics.node_execution_times),
                "dataSourceResponseTimes": dict(self.metrics.data_source_response_times),
            },
        }


def _collect_leaves(value: Any, leaves: list[NodeResult]) -> None:
    if isinstance(value, NodeResult):
        leaves.append(value)
    elif isinstance(value, BranchFailure):
        _collect_leaves(value.partial_results, leaves)
    elif isinstance(value, list):
        for item in value:
            _collect_leaves(item, leaves)


def _has_output(result: Any) -> bool:
    # A branch whose connections were all pruned reached no terminal result
    leaves: list[NodeResult] = []
    _collect_leaves(result, leaves)
    return bool(leaves)


def to_jsonable(value: Any) -> Any:
    """Convert engine values to JSON-safe structures."""
    if isinstance(value, (NodeResult, BranchFailure, UnknownDescriptor)):
        return value.to_dict()
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if value is ABSENT:
        return None
    return value

