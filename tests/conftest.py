"""Shared fixtures for decision engine tests.

Provides:
- Executor settings with short timeouts
- Fake collaborators that record calls and can be slowed down
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from decision_engine.core.config import Settings
from decision_engine.engine import (
    BusinessLogicExecutor,
    Collaborators,
    DataFetcher,
    DefaultValidator,
    ExecutionContext,
    UnknownDescriptor,
    WorkflowExecutor,
)


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------


class FakeBusinessLogic(BusinessLogicExecutor):
    """Returns `parameters["outcome"]` after sleeping `parameters["delay"]` seconds."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def execute(self, descriptor, context):
        delay = descriptor.parameters.get("delay", 0)
        if delay:
            await asyncio.sleep(delay)
        self.calls.append(descriptor.type)
        if descriptor.type == "fail":
            raise RuntimeError("business logic exploded")
        if descriptor.type not in ("custom", "service_call"):
            return UnknownDescriptor(descriptor.type)
        return descriptor.parameters.get("outcome", "approved")


class FakeDataFetcher(DataFetcher):
    """Serves canned payloads keyed by the descriptor name."""

    def __init__(self, payloads: dict[str, dict[str, Any]] | None = None) -> None:
        self.payloads = payloads or {}

    async def fetch(self, descriptor, context):
        if descriptor.type == "fail":
            raise ConnectionError("bureau unreachable")
        if descriptor.type != "api":
            return UnknownDescriptor(descriptor.type)
        return dict(self.payloads.get(descriptor.name or "", {}))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    return Settings(node_timeout=5.0, max_depth=50, http_timeout=5.0)


@pytest.fixture
def business_logic() -> FakeBusinessLogic:
    return FakeBusinessLogic()


@pytest.fixture
def data_fetcher() -> FakeDataFetcher:
    return FakeDataFetcher({"bureau": {"creditScore": 720, "bureau": "experian"}})


@pytest.fixture
def collaborators(business_logic, data_fetcher) -> Collaborators:
    return Collaborators(
        business_logic=business_logic,
        data_fetcher=data_fetcher,
        validator=DefaultValidator(),
    )


@pytest.fixture
def executor(collaborators, test_settings) -> WorkflowExecutor:
    return WorkflowExecutor(collaborators=collaborators, settings=test_settings)


@pytest.fixture
def make_context():
    """Factory for a fresh execution context."""

    def _make(input_data: dict[str, Any] | None = None, **kwargs: Any) -> ExecutionContext:
        return ExecutionContext(
            execution_id=kwargs.pop("execution_id", "exec_test"),
            workflow_id=kwargs.pop("workflow_id", "wf-test"),
            input_data=input_data or {},
            **kwargs,
        )

    return _make
