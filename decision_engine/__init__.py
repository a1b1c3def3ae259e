"""Decision engine - executes graph-shaped credit decision workflows."""

from .core import settings, setup_logging
from .engine import ExecutionContext, ExecutionResult, WorkflowExecutor, load_workflow
from .schemas import WorkflowDefinition
from .services import DecisionService

__version__ = settings.app_version

__all__ = [
    "settings",
    "setup_logging",
    "ExecutionContext",
    "ExecutionResult",
    "WorkflowExecutor",
    "load_workflow",
    "WorkflowDefinition",
    "DecisionService",
]
