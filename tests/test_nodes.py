"""Tests for the individual node handlers."""

import pytest

from decision_engine.core.exceptions import MissingConfigurationError, UnknownNodeKindError
from decision_engine.engine import (
    Collaborators,
    NodeRegistryClass,
    UnknownDescriptor,
    register_all_nodes,
)
from decision_engine.nodes import (
    ActionNode,
    ConditionNode,
    DataSourceNode,
    DecisionNode,
    EndNode,
    RuleSetNode,
    StartNode,
    ValidationNode,
)
from decision_engine.schemas import WorkflowNode

from .factories import cond, node


def make_node(node_id, kind, **data):
    return WorkflowNode.model_validate(node(node_id, kind, **data))


@pytest.fixture
def context(make_context, collaborators):
    ctx = make_context({"riskScore": 847, "state": "CA", "income": 85000})
    ctx.services = collaborators
    return ctx


class TestRegistry:
    def test_all_kinds_registered(self):
        registry = register_all_nodes(NodeRegistryClass())
        assert sorted(registry.list()) == sorted(
            ["start", "end", "condition", "action", "data_source", "rule_set", "decision", "validation"]
        )

    def test_unknown_kind(self):
        registry = register_all_nodes(NodeRegistryClass())
        with pytest.raises(UnknownNodeKindError) as exc:
            registry.get("loop", "n1")
        assert exc.value.node_id == "n1"
        assert "loop" in str(exc.value)

    def test_node_info(self):
        registry = register_all_nodes(NodeRegistryClass())
        info = {i.kind: i for i in registry.get_node_info()}
        assert info["end"].may_branch is False
        assert info["rule_set"].display_name == "Rule Set"


class TestPassThroughNodes:
    @pytest.mark.asyncio
    async def test_start(self, context):
        result = await StartNode().execute(context, make_node("s", "start"))
        assert result.kind == "start"
        assert result.payload["data"]["riskScore"] == 847

    @pytest.mark.asyncio
    async def test_end(self, context):
        result = await EndNode().execute(context, make_node("e", "end"))
        assert result.kind == "end"
        assert result.payload == {"data": context.input_data}


class TestConditionNode:
    @pytest.mark.asyncio
    async def test_aggregates(self, context):
        n = make_node(
            "c",
            "condition",
            conditions=[cond("riskScore", "greater_than", 700), cond("state", "equals", "NY")],
        )
        result = await ConditionNode().execute(context, n)
        assert result.payload["conditionResults"] == [True, False]
        assert result.payload["anyConditionTrue"] is True
        assert result.payload["allConditionsTrue"] is False

    @pytest.mark.asyncio
    async def test_empty_condition_list(self, context):
        result = await ConditionNode().execute(context, make_node("c", "condition"))
        assert result.payload["allConditionsTrue"] is True
        assert result.payload["anyConditionTrue"] is False


class TestRuleSetNode:
    @pytest.mark.asyncio
    async def test_rule_outcomes(self, context):
        n = make_node(
            "r",
            "rule_set",
            rules=[
                {
                    "id": "high-risk",
                    "name": "High risk",
                    "conditions": [cond("riskScore", "greater_than", 800)],
                    "actions": [{"type": "flag", "value": "review"}],
                },
                {
                    "id": "any-of",
                    "logicalOperator": "OR",
                    "conditions": [cond("state", "equals", "NY"), cond("income", "less_than", 10)],
                    "actions": [{"type": "flag", "value": "never"}],
                },
                {"id": "off", "enabled": False, "conditions": []},
                {"id": "vacuous"},
            ],
        )
        result = await RuleSetNode().execute(context, n)
        outcomes = {o["ruleId"]: o for o in result.payload["ruleResults"]}

        assert outcomes["high-risk"]["passed"] is True
        assert outcomes["high-risk"]["actions"] == [{"type": "flag", "value": "review"}]
        assert outcomes["any-of"]["passed"] is False
        assert outcomes["any-of"]["actions"] == []
        assert outcomes["off"] == {"ruleId": "off", "passed": False, "result": "Rule disabled", "actions": []}
        assert outcomes["vacuous"]["passed"] is True
        assert result.payload["rulesPassed"] == 2
        assert result.payload["allRulesPassed"] is False


class TestBusinessLogicNodes:
    @pytest.mark.asyncio
    async def test_action(self, context):
        n = make_node("a", "action", businessLogic={"type": "custom", "parameters": {"outcome": "done"}})
        result = await ActionNode().execute(context, n)
        assert result.payload["result"] == "done"

    @pytest.mark.asyncio
    async def test_decision(self, context):
        n = make_node("d", "decision", business_logic={"type": "custom", "parameters": {"outcome": "declined"}})
        result = await DecisionNode().execute(context, n)
        assert result.kind == "decision"
        assert result.payload["decision"] == "declined"

    @pytest.mark.asyncio
    async def test_missing_business_logic(self, context):
        with pytest.raises(MissingConfigurationError) as exc:
            await ActionNode().execute(context, make_node("a", "action"))
        assert str(exc.value) == 'Action node "a" has no business logic defined'

    @pytest.mark.asyncio
    async def test_unknown_business_logic_type(self, context):
        n = make_node("d", "decision", businessLogic={"type": "ml_model"})
        result = await DecisionNode().execute(context, n)
        assert result.payload["decision"] == UnknownDescriptor("ml_model")


class TestDataSourceNode:
    @pytest.mark.asyncio
    async def test_merges_into_output(self, context):
        n = make_node("ds", "data_source", dataSource={"type": "api", "name": "bureau"})
        result = await DataSourceNode().execute(context, n)

        assert context.output_data == {"creditScore": 720, "bureau": "experian"}
        assert result.payload["fetchedData"]["creditScore"] == 720
        assert result.payload["data"] == context.output_data
        assert "ds" in context.metrics.data_source_response_times

    @pytest.mark.asyncio
    async def test_unknown_type_leaves_output_untouched(self, context):
        n = make_node("ds", "data_source", dataSource={"type": "ftp"})
        result = await DataSourceNode().execute(context, n)
        assert context.output_data == {}
        assert isinstance(result.payload["fetchedData"], UnknownDescriptor)

    @pytest.mark.asyncio
    async def test_missing_descriptor(self, context):
        with pytest.raises(MissingConfigurationError):
            await DataSourceNode().execute(context, make_node("ds", "data_source"))


class TestValidationNode:
    @pytest.mark.asyncio
    async def test_schema_validation(self, context):
        n = make_node(
            "v",
            "validation",
            validation={
                "type": "schema",
                "schema": {"required": ["riskScore"], "properties": {"state": {"type": "string"}}},
            },
        )
        result = await ValidationNode().execute(context, n)
        assert result.payload["isValid"] is True

    @pytest.mark.asyncio
    async def test_failed_schema_validation(self, context):
        n = make_node("v", "validation", validation={"type": "schema", "schema": {"required": ["ssn"]}})
        result = await ValidationNode().execute(context, n)
        assert result.payload["isValid"] is False

    @pytest.mark.asyncio
    async def test_missing_services_fall_back_to_defaults(self, make_context):
        context = make_context({"age": 17})
        n = make_node("v", "validation", validation={"type": "custom", "rule": "age >= 18"})
        result = await ValidationNode().execute(context, n)
        assert isinstance(context.services, Collaborators)
        assert result.payload["isValid"] is False
