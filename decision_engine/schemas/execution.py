"""Execution-related Pydantic schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ExecutionErrorSchema(BaseModel):
    """Schema for execution error."""

    node_id: str
    error: str
    kind: str | None = None
    timestamp: str


class ExecutionLogEntrySchema(BaseModel):
    """Schema for one execution log entry."""

    node_id: str
    node_type: str
    node_label: str
    timestamp: str
    status: Literal["started", "completed", "error"]
    result: dict[str, Any] | None = None
    error: str | None = None


class ExecutionMetricsSchema(BaseModel):
    """Wall-clock timings in milliseconds."""

    total_execution_time: float
    node_execution_times: dict[str, float] = Field(default_factory=dict)
    data_source_response_times: dict[str, float] = Field(default_factory=dict)


class ExecutionResponse(BaseModel):
    """Response schema for a workflow evaluation."""

    execution_id: str = Field(..., description="Unique execution ID")
    workflow_id: str
    status: str = Field(..., description="Traversal status, completed once all branches settled")
    outcome: Literal["decisioned", "partially_decisioned", "not_decisioned"]
    timestamp: str
    results: list[Any] = Field(..., description="One entry per start node, in declaration order")
    execution_log: list[ExecutionLogEntrySchema] = Field(default_factory=list)
    errors: list[ExecutionErrorSchema] = Field(default_factory=list, description="List of errors")
    metrics: ExecutionMetricsSchema
