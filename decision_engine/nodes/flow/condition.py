"""Condition node - evaluates a list of conditions against the context."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..base import BaseNode
from ...engine.condition_evaluator import evaluate_all
from ...schemas.workflow import ConditionNodeConfig

if TYPE_CHECKING:
    from ...engine.types import ExecutionContext, NodeResult
    from ...schemas.workflow import WorkflowNode


class ConditionNode(BaseNode):
    """
    Evaluate every configured condition.

    The result carries both aggregates so outgoing connections can guard on
    `allConditionsTrue` or `anyConditionTrue`. With no conditions, all() is
    true and any() is false.
    """

    display_name = "Condition"

    @property
    def kind(self) -> str:
        return "condition"

    @property
    def description(self) -> str:
        return "Evaluate conditions and expose all/any aggregates for branching"

    async def execute(self, context: ExecutionContext, node: WorkflowNode) -> NodeResult:
        config = node.data
        if not isinstance(config, ConditionNodeConfig):
            raise TypeError(f'Condition node "{node.id}" has no condition list')

        results = evaluate_all(config.conditions, context)

        return self.result({
            "allConditionsTrue": all(results),
            "anyConditionTrue": any(results),
            "conditionResults": results,
            "data": context.input_data,
        })
