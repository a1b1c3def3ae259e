"""Workflow node handler implementations."""

from .base import BaseNode
from .start import StartNode
from .end import EndNode
from .action import ActionNode
from .data_source import DataSourceNode
from .validation import ValidationNode
from .flow import ConditionNode, RuleSetNode, DecisionNode

__all__ = [
    "BaseNode",
    "StartNode",
    "EndNode",
    "ConditionNode",
    "ActionNode",
    "DataSourceNode",
    "RuleSetNode",
    "DecisionNode",
    "ValidationNode",
]
