"""Shared traversal for activation conditions.

Conditions nest through all_of, any_of and not. Registry checks and
diagnostics both need to fold a whole tree into one value, so the walk over
those three composites lives here and each visitor only says what a leaf
means and how child results fold together.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from src.hints.model import AllOfCondition, AnyOfCondition, Condition, NotCondition

T = TypeVar("T")


class ConditionVisitor(ABC, Generic[T]):
    """Folds a condition tree into a value of type T.

    A node is handled by the method named after its class, e.g.
    ``visit_PropertyCondition``; leaves with no such method go to
    ``visit_default``. Composites are walked children first and their results
    handed to the matching ``combine_*`` hook.

    Example, collecting every type name a trigger tests for:

        class TypeNames(ConditionVisitor[frozenset[str]]):
            def visit_default(self, cond):
                return frozenset()

            def visit_TypePresentCondition(self, cond):
                return frozenset({cond.type_name})

            def combine_all_of(self, original, children):
                return frozenset().union(*children)

            combine_any_of = combine_all_of

            def combine_not(self, original, child):
                return child
    """

    def visit(self, condition: Condition) -> T:
        handler = getattr(self, f"visit_{type(condition).__name__}", self.visit_default)
        return handler(condition)

    @abstractmethod
    def visit_default(self, condition: Condition) -> T:
        """Result for a leaf without a dedicated handler."""
        ...

    def visit_AllOfCondition(self, cond: AllOfCondition) -> T:
        return self.combine_all_of(cond, self._visit_each(cond.conditions))

    def visit_AnyOfCondition(self, cond: AnyOfCondition) -> T:
        return self.combine_any_of(cond, self._visit_each(cond.conditions))

    def visit_NotCondition(self, cond: NotCondition) -> T:
        return self.combine_not(cond, self.visit(cond.condition))

    def _visit_each(self, conditions: tuple[Condition, ...]) -> list[T]:
        return [self.visit(c) for c in conditions]

    @abstractmethod
    def combine_all_of(self, original: AllOfCondition, children: list[T]) -> T: ...

    @abstractmethod
    def combine_any_of(self, original: AnyOfCondition, children: list[T]) -> T: ...

    @abstractmethod
    def combine_not(self, original: NotCondition, child: T) -> T:
        """Fold the single operand of a negation."""
        ...
