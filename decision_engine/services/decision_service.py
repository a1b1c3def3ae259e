"""Decision service - the call boundary consumed by the HTTP layer."""

from __future__ import annotations

from typing import Any, Mapping

from ..core.exceptions import WorkflowInactiveError
from ..engine.loader import load_workflow
from ..engine.types import ExecutionResult, to_jsonable
from ..engine.workflow_executor import WorkflowExecutor
from ..schemas.execution import (
    ExecutionErrorSchema,
    ExecutionLogEntrySchema,
    ExecutionMetricsSchema,
    ExecutionResponse,
)
from ..schemas.workflow import WorkflowDefinition, WorkflowStatus

# Retired workflows can still be dry-run through test()
RETIRED_STATUSES = frozenset({WorkflowStatus.DEPRECATED, WorkflowStatus.ARCHIVED})


class DecisionService:
    """Service for evaluating applications against decision workflows."""

    def __init__(self, executor: WorkflowExecutor | None = None) -> None:
        self._executor = executor or WorkflowExecutor()

    async def evaluate(
        self,
        definition: WorkflowDefinition | Mapping[str, Any],
        application: Mapping[str, Any],
        execution_id: str | None = None,
    ) -> ExecutionResponse:
        """Evaluate one application against a workflow."""
        workflow = load_workflow(definition)
        if workflow.status in RETIRED_STATUSES:
            raise WorkflowInactiveError(workflow.id, workflow.status.value)

        context = self._executor.create_context(workflow, dict(application), execution_id)
        result = await self._executor.execute(workflow, context)
        return self._to_response(result)

    async def test(
        self,
        definition: WorkflowDefinition | Mapping[str, Any],
        test_data: Mapping[str, Any] | None = None,
    ) -> ExecutionResponse:
        """Dry-run a workflow, whatever its status."""
        workflow = load_workflow(definition)
        result = await self._executor.test(workflow, dict(test_data or {}))
        return self._to_response(result)

    def _to_response(self, result: ExecutionResult) -> ExecutionResponse:
        return ExecutionResponse(
            execution_id=result.execution_id,
            workflow_id=result.workflow_id,
            status=result.status,
            outcome=result.outcome.value,
            timestamp=result.timestamp.isoformat(),
            results=to_jsonable(result.results),
            execution_log=[
                ExecutionLogEntrySchema(
                    node_id=entry.node_id,
                    node_type=entry.node_kind,
                    node_label=entry.node_label,
                    timestamp=entry.timestamp.isoformat(),
                    status=entry.status.value,
                    result=entry.result.to_dict() if entry.result else None,
                    error=entry.error,
                )
                for entry in result.execution_log
            ],
            errors=[
                ExecutionErrorSchema(
                    node_id=e.node_id,
                    error=e.error,
                    kind=e.kind,
                    timestamp=e.timestamp.isoformat(),
                )
                for e in result.errors
            ],
            metrics=ExecutionMetricsSchema(
                total_execution_time=result.metrics.total_execution_time,
                node_execution_times=dict(result.metrics.node_execution_times),
                data_source_response_times=dict(result.metrics.data_source_response_times),
            ),
        )
