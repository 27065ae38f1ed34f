"""Visitor that renders Condition trees as short human-readable text."""

from __future__ import annotations

from src.hints.model import (
    AllOfCondition,
    AnnotationPresentCondition,
    AnyOfCondition,
    Condition,
    NotCondition,
    PropertyCondition,
    TypeMissingCondition,
    TypePresentCondition,
    UnitCondition,
)

from .base import ConditionVisitor


class ConditionDescriber(ConditionVisitor[str]):
    """Renders conditions for diagnostics and log lines.

    Example output:
        all_of(present(com.example.Foo), property(spring.xml.ignore=false))
    """

    def visit_default(self, condition: Condition) -> str:
        return type(condition).__name__

    def visit_TypePresentCondition(self, cond: TypePresentCondition) -> str:
        return f"present({cond.type_name})"

    def visit_TypeMissingCondition(self, cond: TypeMissingCondition) -> str:
        return f"missing({cond.type_name})"

    def visit_AnnotationPresentCondition(self, cond: AnnotationPresentCondition) -> str:
        return f"annotated({cond.type_name} @{cond.annotation})"

    def visit_PropertyCondition(self, cond: PropertyCondition) -> str:
        if cond.having_value is None:
            return f"property({cond.key})"
        return f"property({cond.key}={cond.having_value})"

    def visit_UnitCondition(self, cond: UnitCondition) -> str:
        return f"unit({cond.unit})"

    def combine_all_of(self, original: AllOfCondition, children: list[str]) -> str:
        return f"all_of({', '.join(children)})"

    def combine_any_of(self, original: AnyOfCondition, children: list[str]) -> str:
        return f"any_of({', '.join(children)})"

    def combine_not(self, original: NotCondition, child: str) -> str:
        return f"not({child})"


def describe_condition(condition: Condition) -> str:
    """Convenience function to describe a condition."""
    return ConditionDescriber().visit(condition)
