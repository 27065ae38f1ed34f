"""Visitor that collects configuration-unit references from Condition trees."""

from __future__ import annotations

from src.hints.model import (
    AllOfCondition,
    AnyOfCondition,
    Condition,
    NotCondition,
    UnitCondition,
)

from .base import ConditionVisitor


class UnitReferenceCollector(ConditionVisitor[set[str]]):
    """Collects the names of units referenced through UnitCondition nodes.

    Used at registry build time to report conditions that point at units no
    hint source declares.

    Usage:
        refs = UnitReferenceCollector().visit(condition)
    """

    def visit_default(self, condition: Condition) -> set[str]:
        return set()

    def visit_UnitCondition(self, cond: UnitCondition) -> set[str]:
        return {cond.unit}

    def combine_all_of(self, original: AllOfCondition, children: list[set[str]]) -> set[str]:
        return set().union(*children)

    def combine_any_of(self, original: AnyOfCondition, children: list[set[str]]) -> set[str]:
        return set().union(*children)

    def combine_not(self, original: NotCondition, child: set[str]) -> set[str]:
        return child
