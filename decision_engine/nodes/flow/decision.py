"""Decision node - runs business logic and frames it as a decision."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..base import BaseNode

if TYPE_CHECKING:
    from ...engine.types import ExecutionContext, NodeResult
    from ...schemas.workflow import WorkflowNode


class DecisionNode(BaseNode):
    """Delegate to the business logic executor and report its outcome as the decision."""

    display_name = "Decision"

    @property
    def kind(self) -> str:
        return "decision"

    @property
    def description(self) -> str:
        return "Produce a decision outcome from business logic"

    async def execute(self, context: ExecutionContext, node: WorkflowNode) -> NodeResult:
        business_logic = self.require(node, getattr(node.data, "business_logic", None), "business_logic")

        decision = await self.services(context).business_logic.execute(business_logic, context)

        return self.result({
            "decision": decision,
            "data": context.input_data,
        })
