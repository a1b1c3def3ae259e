"""Tests for the decision service boundary."""

import pytest

from decision_engine.core.exceptions import InvalidWorkflowError, WorkflowInactiveError
from decision_engine.schemas import ExecutionResponse
from decision_engine.services import DecisionService

from .factories import cond, edge, node


def loan_workflow(status="active"):
    return {
        "id": "personal-loan",
        "name": "Personal loan",
        "status": status,
        "nodes": [
            node("s", "start"),
            node("c", "condition", conditions=[cond("riskScore", "greater_than", 700)]),
            node("d", "decision", businessLogic={"type": "custom", "parameters": {"outcome": "approved"}}),
            node("e", "end"),
        ],
        "connections": [
            edge("s", "c"),
            edge("c", "d", cond("allConditionsTrue", "equals", True)),
            edge("d", "e"),
        ],
    }


@pytest.fixture
def service(executor):
    return DecisionService(executor)


class TestEvaluate:
    @pytest.mark.asyncio
    async def test_response(self, service):
        response = await service.evaluate(loan_workflow(), {"riskScore": 847}, execution_id="exec_1")

        assert isinstance(response, ExecutionResponse)
        assert response.execution_id == "exec_1"
        assert response.workflow_id == "personal-loan"
        assert response.status == "completed"
        assert response.outcome == "decisioned"
        assert [e.node_id for e in response.execution_log if e.status == "completed"] == ["s", "c", "d", "e"]
        assert response.execution_log[-1].result["type"] == "end"
        assert response.errors == []
        assert set(response.metrics.node_execution_times) == {"s", "c", "d", "e"}

    @pytest.mark.asyncio
    async def test_generated_execution_id(self, service):
        response = await service.evaluate(loan_workflow(), {"riskScore": 1})
        assert response.execution_id.startswith("exec_")

    @pytest.mark.asyncio
    async def test_errors_are_reported(self, service):
        workflow = loan_workflow()
        workflow["nodes"][2] = node("d", "decision")

        response = await service.evaluate(workflow, {"riskScore": 847})

        assert response.outcome == "not_decisioned"
        assert response.errors[0].node_id == "d"
        assert response.errors[0].kind == "MissingConfigurationError"
        assert response.results[0]["failed"] is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["archived", "deprecated"])
    async def test_retired_workflow(self, service, status):
        with pytest.raises(WorkflowInactiveError) as exc:
            await service.evaluate(loan_workflow(status), {"riskScore": 847})
        assert exc.value.status == status

    @pytest.mark.asyncio
    async def test_invalid_payload(self, service):
        with pytest.raises(InvalidWorkflowError):
            await service.evaluate({"nodes": []}, {})


class TestDryRun:
    @pytest.mark.asyncio
    async def test_any_status(self, service):
        response = await service.test(loan_workflow("archived"), {"riskScore": 847})

        assert response.execution_id.startswith("test_")
        assert response.outcome == "decisioned"
