"""Validation node - checks the application payload."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import BaseNode

if TYPE_CHECKING:
    from ..engine.types import ExecutionContext, NodeResult
    from ..schemas.workflow import WorkflowNode


class ValidationNode(BaseNode):
    """Run the validator and report `isValid`."""

    display_name = "Validation"

    @property
    def kind(self) -> str:
        return "validation"

    @property
    def description(self) -> str:
        return "Validate application data against a schema or custom rule"

    async def execute(self, context: ExecutionContext, node: WorkflowNode) -> NodeResult:
        validation = self.require(node, getattr(node.data, "validation", None), "validation")

        is_valid = await self.services(context).validator.validate(validation, context)

        return self.result({
            "isValid": bool(is_valid),
            "data": context.input_data,
        })
