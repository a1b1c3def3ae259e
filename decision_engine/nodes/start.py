"""Start node - entry point of a decision workflow."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import BaseNode

if TYPE_CHECKING:
    from ..engine.types import ExecutionContext, NodeResult
    from ..schemas.workflow import WorkflowNode


class StartNode(BaseNode):
    """Entry point - passes the application payload through."""

    display_name = "Start"

    @property
    def kind(self) -> str:
        return "start"

    @property
    def description(self) -> str:
        return "Entry point for workflow execution"

    async def execute(self, context: ExecutionContext, node: WorkflowNode) -> NodeResult:
        return self.result({"data": context.input_data})
