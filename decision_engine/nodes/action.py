"""Action node - runs the configured business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import BaseNode

if TYPE_CHECKING:
    from ..engine.types import ExecutionContext, NodeResult
    from ..schemas.workflow import WorkflowNode


class ActionNode(BaseNode):
    """Execute business logic (embedded expression or service call)."""

    display_name = "Action"

    @property
    def kind(self) -> str:
        return "action"

    @property
    def description(self) -> str:
        return "Execute business logic"

    async def execute(self, context: ExecutionContext, node: WorkflowNode) -> NodeResult:
        business_logic = self.require(node, getattr(node.data, "business_logic", None), "business_logic")

        result = await self.services(context).business_logic.execute(business_logic, context)

        return self.result({
            "result": result,
            "data": context.input_data,
        })
