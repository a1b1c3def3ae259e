"""Service layer for the decision engine."""

from .decision_service import DecisionService

__all__ = [
    "DecisionService",
]
