"""Dotted-path field resolution against an execution context."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .types import ABSENT, ExecutionContext

# First path segments that address the context itself when no data field matches
CONTEXT_KEYS = frozenset(
    {"executionId", "workflowId", "inputData", "outputData", "nodeResults", "result"}
)


def get_path(source: Any, path: str) -> Any:
    """
    Walk `path` ("data.user.name") through nested mappings and lists.

    Returns ABSENT as soon as a segment cannot be followed. Never raises.
    """
    if not path:
        return ABSENT

    current: Any = source
    for key in path.split("."):
        if isinstance(current, Mapping):
            if key not in current:
                return ABSENT
            current = current[key]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if not key.isdigit() or int(key) >= len(current):
                return ABSENT
            current = current[int(key)]
        else:
            return ABSENT
    return current


def resolve(
    path: str,
    context: ExecutionContext,
    result: Mapping[str, Any] | None = None,
) -> Any:
    """
    Resolve a field reference against the context.

    The path is looked up in the guarded node's result payload, then the
    input data, then the output data. Only when none of them has it does a
    leading context key ("inputData.riskScore", "result.decision") walk the
    context scope, so data fields are never shadowed by those names.
    """
    if not isinstance(path, str) or not path:
        return ABSENT

    for source in (result, context.input_data, context.output_data):
        if source is None:
            continue
        value = get_path(source, path)
        if value is not ABSENT:
            return value

    head = path.split(".", 1)[0]
    if head in CONTEXT_KEYS:
        scope = context.scope()
        scope["result"] = dict(result) if result is not None else {}
        return get_path(scope, path)
    return ABSENT
