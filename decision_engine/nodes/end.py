"""End node - terminates a branch and hands its result upward."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import BaseNode

if TYPE_CHECKING:
    from ..engine.types import ExecutionContext, NodeResult
    from ..schemas.workflow import WorkflowNode


class EndNode(BaseNode):
    """Terminal node. Outgoing connections are never followed."""

    display_name = "End"

    @property
    def kind(self) -> str:
        return "end"

    @property
    def description(self) -> str:
        return "Finish the branch and collect its result"

    @property
    def may_branch(self) -> bool:
        return False

    async def execute(self, context: ExecutionContext, node: WorkflowNode) -> NodeResult:
        return self.result({"data": context.input_data})
