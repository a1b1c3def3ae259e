"""Flow-control node handlers."""

from .condition import ConditionNode
from .rule_set import RuleSetNode
from .decision import DecisionNode

__all__ = [
    "ConditionNode",
    "RuleSetNode",
    "DecisionNode",
]
