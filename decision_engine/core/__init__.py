"""Core module for the decision engine - config, exceptions, and logging."""

from .config import settings, Settings, get_settings
from .exceptions import (
    DecisionEngineError,
    NoStartNodeError,
    UnknownNodeKindError,
    MissingConfigurationError,
    TargetNodeNotFoundError,
    InvalidWorkflowError,
    NodeTimeoutError,
    MaxDepthExceededError,
    BranchFailedError,
    WorkflowInactiveError,
    WorkflowExecutionError,
    ExpressionError,
)
from .logging import setup_logging

__all__ = [
    # Config
    "settings",
    "Settings",
    "get_settings",
    # Exceptions
    "DecisionEngineError",
    "NoStartNodeError",
    "UnknownNodeKindError",
    "MissingConfigurationError",
    "TargetNodeNotFoundError",
    "InvalidWorkflowError",
    "NodeTimeoutError",
    "MaxDepthExceededError",
    "BranchFailedError",
    "WorkflowInactiveError",
    "WorkflowExecutionError",
    "ExpressionError",
    # Logging
    "setup_logging",
]
