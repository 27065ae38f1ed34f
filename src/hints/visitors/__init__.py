"""Visitor implementations for Condition tree traversal."""

from .base import ConditionVisitor
from .describer import ConditionDescriber, describe_condition
from .unit_references import UnitReferenceCollector

__all__ = ["ConditionVisitor", "ConditionDescriber", "UnitReferenceCollector", "describe_condition"]
