"""Workflow definition Pydantic schemas."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class NodeKind(str, Enum):
    """Node kinds the engine knows how to execute."""

    START = "start"
    END = "end"
    CONDITION = "condition"
    ACTION = "action"
    DATA_SOURCE = "data_source"
    RULE_SET = "rule_set"
    DECISION = "decision"
    VALIDATION = "validation"


class WorkflowStatus(str, Enum):
    """Lifecycle status of a workflow definition."""

    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"
    DEPRECATED = "deprecated"
    ARCHIVED = "archived"


class ConditionOperator(str, Enum):
    """Recognized condition operators. Anything else evaluates to false."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"
    EXISTS = "exists"


class WireModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Position(WireModel):
    """Canvas position. Presentation only."""

    x: float = 0
    y: float = 0


class Condition(WireModel):
    """A single (field, operator, value) predicate."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"field": "riskScore", "operator": "greater_than", "value": 700}
        }
    )

    field: str
    operator: str
    value: Any = None


class RuleAction(WireModel):
    """Action attached to a rule, echoed when the rule passes."""

    type: str
    value: Any = None
    message: str | None = None


class Rule(WireModel):
    """Business rule evaluated by a rule_set node."""

    id: str
    name: str | None = None
    enabled: bool = True
    conditions: list[Condition] = Field(default_factory=list)
    logical_operator: Literal["AND", "OR"] = "AND"
    actions: list[RuleAction] = Field(default_factory=list)


class BusinessLogicDescriptor(WireModel):
    """Business logic run by action and decision nodes."""

    type: str = Field(..., description="custom or service_call")
    implementation: str | None = Field(None, description="Expression for custom logic")
    service: str | None = Field(None, description="Service name for service calls")
    endpoint: str | None = Field(None, description="URL the service call is POSTed to")
    parameters: dict[str, Any] = Field(default_factory=dict)


class DataSourceDescriptor(WireModel):
    """External data fetched by data_source nodes."""

    type: str = Field(..., description="api, database or file")
    name: str | None = None
    url: str | None = None
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, Any] = Field(default_factory=dict)
    query: str | None = None
    query_parameters: list[Any] = Field(default_factory=list)
    database: str | None = None
    path: str | None = None


class ValidationDescriptor(WireModel):
    """Validation performed by validation nodes."""

    type: str = Field(..., description="schema or custom")
    schema_: dict[str, Any] = Field(default_factory=dict, alias="schema")
    rule: str | None = Field(None, description="Boolean expression for custom validation")


# --- Node configuration variants ---


class NodeConfig(WireModel):
    """Configuration shared by every node. Used as-is for unknown kinds."""

    model_config = ConfigDict(extra="allow")

    label: str | None = None
    description: str | None = None


class _KindConfig(NodeConfig):
    model_config = ConfigDict(extra="forbid")


class StartNodeConfig(_KindConfig):
    pass


class EndNodeConfig(_KindConfig):
    pass


class ConditionNodeConfig(_KindConfig):
    conditions: list[Condition] = Field(default_factory=list)


class RuleSetNodeConfig(_KindConfig):
    rules: list[Rule] = Field(default_factory=list)


class ActionNodeConfig(_KindConfig):
    business_logic: BusinessLogicDescriptor | None = None


class DecisionNodeConfig(_KindConfig):
    business_logic: BusinessLogicDescriptor | None = None


class DataSourceNodeConfig(_KindConfig):
    data_source: DataSourceDescriptor | None = None


class ValidationNodeConfig(_KindConfig):
    validation: ValidationDescriptor | None = None


NODE_CONFIG_TYPES: dict[str, type[NodeConfig]] = {
    NodeKind.START.value: StartNodeConfig,
    NodeKind.END.value: EndNodeConfig,
    NodeKind.CONDITION.value: ConditionNodeConfig,
    NodeKind.RULE_SET.value: RuleSetNodeConfig,
    NodeKind.ACTION.value: ActionNodeConfig,
    NodeKind.DECISION.value: DecisionNodeConfig,
    NodeKind.DATA_SOURCE.value: DataSourceNodeConfig,
    NodeKind.VALIDATION.value: ValidationNodeConfig,
}


class WorkflowNode(WireModel):
    """A node in a workflow. `data` is parsed into the variant for `kind`."""

    id: str = Field(..., description="Unique id within the workflow")
    kind: str = Field(..., alias="type", description="Node kind")
    position: Position | None = Field(None, description="UI position {x, y}")
    data: NodeConfig = Field(default_factory=NodeConfig)

    @model_validator(mode="before")
    @classmethod
    def _parse_config(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values

        values = dict(values)
        kind_key = "type" if "type" in values else "kind"
        kind = values.get(kind_key)
        if isinstance(kind, Enum):
            kind = kind.value
            values[kind_key] = kind

        config_cls = NODE_CONFIG_TYPES.get(kind, NodeConfig)
        raw = values.get("data")
        if isinstance(raw, config_cls):
            return values
        if isinstance(raw, NodeConfig):
            raw = raw.model_dump(exclude_unset=True)

        try:
            values["data"] = config_cls.model_validate(raw or {})
        except ValidationError as e:
            raise ValueError(
                f'configuration of node "{values.get("id")}" does not match kind "{kind}": {e}'
            ) from e
        return values

    @property
    def label(self) -> str:
        return self.data.label or f"{self.kind} Node"


class WorkflowConnection(WireModel):
    """Directed, optionally guarded edge between two nodes."""

    id: str
    source: str
    target: str
    label: str | None = None
    condition: Condition | None = None
    conditions: list[Condition] = Field(default_factory=list)

    @property
    def guards(self) -> list[Condition]:
        """All guard conditions; they are combined with AND."""
        if self.condition is None:
            return list(self.conditions)
        return [self.condition, *self.conditions]


class DataRequirements(WireModel):
    """Fields a workflow expects from the application payload."""

    required: list[str] = Field(default_factory=list)
    optional: list[str] = Field(default_factory=list)
    external: list[str] = Field(default_factory=list)


class WorkflowDefinition(WireModel):
    """Declarative decision workflow."""

    id: str
    name: str | None = None
    description: str | None = None
    version: str = "1.0.0"
    status: WorkflowStatus = WorkflowStatus.DRAFT
    nodes: list[WorkflowNode] = Field(default_factory=list)
    connections: list[WorkflowConnection] = Field(default_factory=list)
    data_requirements: DataRequirements = Field(default_factory=DataRequirements)

    @field_validator("nodes")
    @classmethod
    def _unique_node_ids(cls, nodes: list[WorkflowNode]) -> list[WorkflowNode]:
        seen: set[str] = set()
        duplicates: list[str] = []
        for node in nodes:
            if node.id in seen:
                duplicates.append(node.id)
            seen.add(node.id)
        if duplicates:
            raise ValueError(f"duplicate node ids: {', '.join(duplicates)}")
        return nodes

    def start_nodes(self) -> list[WorkflowNode]:
        """Start nodes in declaration order."""
        return [n for n in self.nodes if n.kind == NodeKind.START.value]

    def outgoing(self, node_id: str) -> list[WorkflowConnection]:
        """Connections leaving a node, in declaration order."""
        return [c for c in self.connections if c.source == node_id]
