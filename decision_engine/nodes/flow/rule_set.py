"""Rule set node - judges each configured rule independently."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from ..base import BaseNode
from ...engine.condition_evaluator import evaluate_all
from ...schemas.workflow import Rule, RuleSetNodeConfig

if TYPE_CHECKING:
    from ...engine.types import ExecutionContext, NodeResult
    from ...schemas.workflow import WorkflowNode


class RuleSetNode(BaseNode):
    """Evaluate rules one by one. A rule that does not pass never fails the node."""

    display_name = "Rule Set"

    @property
    def kind(self) -> str:
        return "rule_set"

    @property
    def description(self) -> str:
        return "Evaluate business rules and report per-rule outcomes"

    async def execute(self, context: ExecutionContext, node: WorkflowNode) -> NodeResult:
        config = node.data
        if not isinstance(config, RuleSetNodeConfig):
            raise TypeError(f'Rule set node "{node.id}" has a malformed rule list')

        outcomes = [self._evaluate_rule(rule, context) for rule in config.rules]

        return self.result({
            "ruleResults": outcomes,
            "rulesPassed": sum(1 for o in outcomes if o["passed"]),
            "allRulesPassed": all(o["passed"] for o in outcomes),
            "data": context.input_data,
        })

    def _evaluate_rule(self, rule: Rule, context: ExecutionContext) -> dict[str, Any]:
        if not rule.enabled:
            return {"ruleId": rule.id, "passed": False, "result": "Rule disabled", "actions": []}

        results = evaluate_all(rule.conditions, context)
        if not results:
            passed = True
        elif rule.logical_operator == "OR":
            passed = any(results)
        else:
            passed = all(results)

        return {
            "ruleId": rule.id,
            "ruleName": rule.name,
            "passed": passed,
            "result": "Rule passed" if passed else "Rule failed",
            "conditionResults": results,
            "actions": [a.model_dump(exclude_none=True) for a in rule.actions] if passed else [],
        }
