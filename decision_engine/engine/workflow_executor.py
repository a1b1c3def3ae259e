"""
Workflow executor - walks a decision workflow graph.

Every start node gets its own branch task. At each node, outgoing
connections whose guards pass are followed concurrently and the node waits
for all of them before handing their results upward.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

import httpx

from ..core.config import Settings, get_settings
from ..core.exceptions import (
    BranchFailedError,
    DecisionEngineError,
    MaxDepthExceededError,
    NoStartNodeError,
    NodeTimeoutError,
    TargetNodeNotFoundError,
)
from .collaborators import Collaborators
from .condition_evaluator import evaluate
from .node_registry import NodeRegistryClass, node_registry, register_all_nodes
from .types import (
    BranchFailure,
    ExecutionContext,
    ExecutionLogEntry,
    ExecutionResult,
    ExecutionState,
    LogStatus,
    NodeResult,
    NodeState,
)

if TYPE_CHECKING:
    from ..nodes.base import BaseNode
    from ..schemas.workflow import WorkflowConnection, WorkflowDefinition, WorkflowNode

logger = logging.getLogger(__name__)


class WorkflowExecutor:
    """Executes decision workflows with structured fan-out/fan-in concurrency."""

    def __init__(
        self,
        registry: NodeRegistryClass | None = None,
        collaborators: Collaborators | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        if registry is None:
            registry = register_all_nodes(node_registry)
        self._registry = registry
        self._services = collaborators or Collaborators.from_settings(self._settings)

    async def execute(
        self, definition: WorkflowDefinition, context: ExecutionContext
    ) -> ExecutionResult:
        """
        Execute a workflow against one application payload.

        Args:
            definition: The workflow definition to execute
            context: Fresh execution context owned by this call

        Returns:
            ExecutionResult with one entry per start node, in declaration order.
            A start branch that failed is represented by a BranchFailure.

        Raises:
            NoStartNodeError: If the definition has no start node
        """
        start_nodes = definition.start_nodes()
        if not start_nodes:
            context.execution_state = ExecutionState.FAILED
            raise NoStartNodeError(definition.id)

        node_map: dict[str, WorkflowNode] = {n.id: n for n in definition.nodes}
        for node_id in node_map:
            context.node_states.setdefault(node_id, NodeState.PENDING)

        context.services = self._services
        context.execution_state = ExecutionState.RUNNING
        logger.info(
            "Executing workflow %s (execution %s) from %d start node(s)",
            definition.id,
            context.execution_id,
            len(start_nodes),
        )

        # Shared HTTP client for the collaborators, unless the caller brought one
        owns_client = context.http_client is None
        if owns_client:
            context.http_client = httpx.AsyncClient(timeout=self._settings.http_timeout)

        started = time.perf_counter()
        try:
            outcomes = await asyncio.gather(
                *(
                    self._execute_from_node(definition, node_map, node, context, depth=0)
                    for node in start_nodes
                ),
                return_exceptions=True,
            )
        except BaseException:
            context.execution_state = ExecutionState.FAILED
            raise
        finally:
            context.metrics.total_execution_time = (time.perf_counter() - started) * 1000
            if owns_client:
                await context.http_client.aclose()
                context.http_client = None

        results: list[Any] = []
        for node, outcome in zip(start_nodes, outcomes):
            if isinstance(outcome, Exception):
                results.append(self._branch_failure(node, outcome))
            elif isinstance(outcome, BaseException):
                context.execution_state = ExecutionState.FAILED
                raise outcome
            else:
                results.append(outcome)

        context.execution_state = ExecutionState.COMPLETED
        result = ExecutionResult(
            results=results,
            execution_log=list(context.execution_log),
            status=ExecutionState.COMPLETED.value,
            timestamp=datetime.now(),
            execution_id=context.execution_id,
            workflow_id=definition.id,
            errors=list(context.errors),
            metrics=context.metrics,
        )

        log = logger.warning if result.errors else logger.info
        log(
            "Workflow %s (execution %s) finished: %s, %d error(s) in %.1fms",
            definition.id,
            context.execution_id,
            result.outcome.value,
            len(result.errors),
            context.metrics.total_execution_time,
        )
        return result

    async def test(
        self, definition: WorkflowDefinition, test_data: dict[str, Any] | None = None
    ) -> ExecutionResult:
        """Dry-run a workflow against test data in a fresh context."""
        context = ExecutionContext(
            execution_id=f"test_{int(datetime.now().timestamp() * 1000)}",
            workflow_id=definition.id,
            input_data=test_data or {},
            execution_state=ExecutionState.PENDING,
        )
        return await self.execute(definition, context)

    def create_context(
        self,
        definition: WorkflowDefinition,
        input_data: dict[str, Any],
        execution_id: str | None = None,
    ) -> ExecutionContext:
        """Create a fresh execution context."""
        return ExecutionContext(
            execution_id=execution_id or self._generate_id(),
            workflow_id=definition.id,
            input_data=input_data,
        )

    async def _execute_from_node(
        self,
        definition: WorkflowDefinition,
        node_map: dict[str, WorkflowNode],
        node: WorkflowNode,
        context: ExecutionContext,
        depth: int,
    ) -> Any:
        """
        Execute a node and, recursively, everything it leads to.

        Returns the node's own result when the branch ends here, otherwise the
        list of non-null results of the followed connections.
        """
        await context.append_log(self._log_entry(node, LogStatus.STARTED))
        await context.set_node_state(node.id, NodeState.RUNNING)
        logger.debug("Node %s (%s) started", node.id, node.kind)

        started = time.perf_counter()
        try:
            if depth > self._settings.max_depth:
                raise MaxDepthExceededError(node.id, self._settings.max_depth)
            handler = self._registry.get(node.kind, node.id)
            result = await self._run_handler(handler, node, context)
        except Exception as e:
            elapsed = (time.perf_counter() - started) * 1000
            message = str(e) or type(e).__name__
            await context.append_log(self._log_entry(node, LogStatus.ERROR, error=message))
            await context.record_error(node.id, e, elapsed)
            if isinstance(e, DecisionEngineError):
                logger.warning("Node %s (%s) failed: %s", node.id, node.kind, e)
            else:
                logger.exception("Node %s (%s) raised unexpectedly", node.id, node.kind)
            raise

        elapsed = (time.perf_counter() - started) * 1000
        await context.record_result(node.id, result, elapsed)
        await context.append_log(self._log_entry(node, LogStatus.COMPLETED, result=result))
        logger.debug("Node %s (%s) completed in %.1fms", node.id, node.kind, elapsed)

        if not handler.may_branch:
            return result

        outgoing = definition.outgoing(node.id)
        if not outgoing:
            return result

        outcomes = await asyncio.gather(
            *(
                self._follow(definition, node_map, connection, result, context, depth)
                for connection in outgoing
            ),
            return_exceptions=True,
        )

        collected: list[Any] = []
        errors: list[Exception] = []
        for outcome in outcomes:
            if isinstance(outcome, BranchFailedError):
                errors.append(outcome)
                if outcome.partial_results:
                    collected.append(outcome.partial_results)
            elif isinstance(outcome, Exception):
                errors.append(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            elif outcome is not None:
                collected.append(outcome)

        if errors:
            raise BranchFailedError(node.id, errors, collected)
        return collected

    async def _follow(
        self,
        definition: WorkflowDefinition,
        node_map: dict[str, WorkflowNode],
        connection: WorkflowConnection,
        source_result: NodeResult,
        context: ExecutionContext,
        depth: int,
    ) -> Any:
        """Follow one connection. Returns None when its guard prunes it."""
        if not self._should_follow(connection, source_result, context):
            logger.debug("Connection %s pruned by its guard", connection.id)
            return None

        target = node_map.get(connection.target)
        if target is None:
            error = TargetNodeNotFoundError(connection.id, connection.target)
            await context.record_error(connection.target, error, update_state=False)
            logger.warning("Connection %s: %s", connection.id, error)
            raise error

        return await self._execute_from_node(definition, node_map, target, context, depth + 1)

    def _should_follow(
        self,
        connection: WorkflowConnection,
        source_result: NodeResult,
        context: ExecutionContext,
    ) -> bool:
        """A connection without guards is always followed; guards are ANDed."""
        guards = connection.guards
        if not guards:
            return True
        return all(evaluate(guard, context, source_result.payload) for guard in guards)

    async def _run_handler(
        self, handler: BaseNode, node: WorkflowNode, context: ExecutionContext
    ) -> NodeResult:
        timeout = self._settings.node_timeout
        if timeout is None:
            return await handler.execute(context, node)
        try:
            return await asyncio.wait_for(handler.execute(context, node), timeout)
        except asyncio.TimeoutError:
            raise NodeTimeoutError(node.id, timeout) from None

    def _branch_failure(self, node: WorkflowNode, error: Exception) -> BranchFailure:
        partial = error.partial_results if isinstance(error, BranchFailedError) else []
        return BranchFailure(node_id=node.id, error=str(error), partial_results=partial)

    def _log_entry(
        self,
        node: WorkflowNode,
        status: LogStatus,
        result: NodeResult | None = None,
        error: str | None = None,
    ) -> ExecutionLogEntry:
        return ExecutionLogEntry(
            node_id=node.id,
            node_kind=node.kind,
            node_label=node.label,
            timestamp=datetime.now(),
            status=status,
            result=result,
            error=error,
        )

    def _generate_id(self) -> str:
        """Generate unique execution ID."""
        return f"exec_{int(datetime.now().timestamp() * 1000)}_{uuid.uuid4().hex[:7]}"
