"""
Sandboxed expressions for embedded business logic and custom validation rules.

Backed by simpleeval, so no eval() or exec() ever sees workflow input.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Any

from simpleeval import DEFAULT_FUNCTIONS, DEFAULT_OPERATORS, SimpleEval

from ..core.exceptions import ExpressionError

logger = logging.getLogger(__name__)


def _ratio(numerator: Any, denominator: Any, default: float = 0.0) -> float:
    denominator = float(denominator or 0)
    if denominator == 0:
        return default
    return float(numerator or 0) / denominator


def _between(value: Any, low: Any, high: Any) -> bool:
    return value is not None and low <= value <= high


def _coalesce(*values: Any) -> Any:
    return next((v for v in values if v is not None), None)


def _age(birth_date: str) -> int:
    born = date.fromisoformat(str(birth_date)[:10])
    today = date.today()
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def _monthly_payment(principal: Any, annual_rate: Any, months: Any) -> float:
    """Amortized payment; `annual_rate` is a fraction (0.079 for 7.9%)."""
    principal, months = float(principal), int(months)
    rate = float(annual_rate) / 12
    if rate == 0:
        return principal / months
    return principal * rate / (1 - (1 + rate) ** -months)


class ExpressionEngine:
    """
    Evaluates single expressions such as ``debt / income < 0.43``.

    Names visible to an expression are the top-level input fields plus
    `input`, `output` and `params`.
    """

    def __init__(self) -> None:
        self._functions: dict[str, Any] = {
            **DEFAULT_FUNCTIONS,
            "str": str,
            "int": int,
            "float": float,
            "len": len,
            "abs": abs,
            "min": min,
            "max": max,
            "sum": sum,
            "round": round,
            "floor": math.floor,
            "ceil": math.ceil,
            # Decisioning helpers
            "ratio": _ratio,
            "between": _between,
            "clamp": lambda v, low, high: max(low, min(high, v)),
            "coalesce": _coalesce,
            "age": _age,
            "monthly_payment": _monthly_payment,
            "today": lambda: date.today().isoformat(),
            "timestamp": lambda: datetime.now().isoformat(),
        }

    def evaluate(self, expression: str, names: dict[str, Any]) -> Any:
        """Evaluate one expression. Raises ExpressionError on failure."""
        # Concurrent branches each get their own evaluator
        evaluator = SimpleEval(
            operators=DEFAULT_OPERATORS.copy(),
            functions=self._functions,
            names=names,
        )
        try:
            return evaluator.eval(expression)
        except Exception as e:
            logger.warning("Could not evaluate %r: %s", expression, e)
            raise ExpressionError(expression, str(e)) from e

    @staticmethod
    def create_names(
        input_data: dict[str, Any],
        output_data: dict[str, Any],
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Name table for one evaluation."""
        names = {k: v for k, v in input_data.items() if isinstance(k, str) and k.isidentifier()}
        names["input"] = input_data
        names["output"] = output_data
        names["params"] = params or {}
        names.update(true=True, false=False, null=None)
        return names


expression_engine = ExpressionEngine()
