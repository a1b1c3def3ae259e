"""Evaluation of (field, operator, value) conditions."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..schemas.workflow import Condition, ConditionOperator
from .field_resolver import resolve
from .types import ABSENT, ExecutionContext

logger = logging.getLogger(__name__)


def evaluate(
    condition: Condition,
    context: ExecutionContext,
    result: Mapping[str, Any] | None = None,
) -> bool:
    """
    Evaluate a single condition against the context.

    Unknown operators and values that cannot be compared evaluate to False.
    Never raises.
    """
    field_value = resolve(condition.field, context, result)
    return compare(field_value, condition.operator, condition.value)


def evaluate_all(
    conditions: Iterable[Condition],
    context: ExecutionContext,
    result: Mapping[str, Any] | None = None,
) -> list[bool]:
    """Evaluate each condition independently, preserving order."""
    return [evaluate(c, context, result) for c in conditions]


def compare(field_value: Any, operator: str, compare_value: Any) -> bool:
    """Apply `operator` to an already resolved field value."""
    if operator == ConditionOperator.EXISTS:
        return field_value is not ABSENT and field_value is not None

    if operator == ConditionOperator.EQUALS:
        return field_value is not ABSENT and _equals(field_value, compare_value)
    elif operator == ConditionOperator.NOT_EQUALS:
        return field_value is ABSENT or not _equals(field_value, compare_value)
    elif operator == ConditionOperator.GREATER_THAN:
        return _ordered(field_value, compare_value, lambda a, b: a > b)
    elif operator == ConditionOperator.LESS_THAN:
        return _ordered(field_value, compare_value, lambda a, b: a < b)
    elif operator == ConditionOperator.CONTAINS:
        if field_value is ABSENT:
            return False
        return _to_text(compare_value) in _to_text(field_value)

    logger.debug("Unknown condition operator %r evaluates to False", operator)
    return False


def _equals(left: Any, right: Any) -> bool:
    # Strict: True must not equal 1
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return left == right


def _ordered(left: Any, right: Any, op: Any) -> bool:
    if left is ABSENT or left is None or right is None:
        return False
    if isinstance(left, str) and isinstance(right, str):
        try:
            return op(float(left), float(right))
        except ValueError:
            return op(left, right)
    try:
        return op(float(left), float(right))
    except (ValueError, TypeError):
        return False


def _to_text(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)
