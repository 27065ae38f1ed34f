"""Evaluator for hint conditions against the closed world.

Evaluation is a pure function of (condition, fact base): no caching, no
side effects, so the resolver may ask the same question repeatedly and get
the same answer.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .diagnostics import DiagnosticKind, Diagnostics
from .errors import UnresolvableConditionError
from .facts import FactBase
from .model import (
    AllOfCondition,
    AnnotationPresentCondition,
    AnyOfCondition,
    Condition,
    ConfigurationUnit,
    NotCondition,
    PropertyCondition,
    TypeMissingCondition,
    TypePresentCondition,
    UnitCondition,
)
from .visitors import describe_condition

logger = logging.getLogger(__name__)


class ConditionEvaluator:
    """Evaluates Condition objects to boolean results.

    Args:
        units: Configuration units by name, needed to answer UnitCondition.
            Without them every UnitCondition is unresolvable.
    """

    def __init__(self, units: Mapping[str, ConfigurationUnit] | None = None):
        self.units: Mapping[str, ConfigurationUnit] = units or {}

    def evaluate(self, condition: Condition, facts: FactBase) -> bool:
        """Evaluate a condition to a boolean.

        Raises:
            UnresolvableConditionError: If the condition references something
                the fact base cannot answer
        """
        return self._evaluate(condition, facts, ())

    def evaluate_safely(
        self,
        condition: Condition,
        facts: FactBase,
        unit: str | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> bool:
        """Evaluate, treating an unresolvable condition as False.

        Absence of reflective access is the safer failure, so the problem is
        reported rather than raised.
        """
        try:
            return self.evaluate(condition, facts)
        except UnresolvableConditionError as e:
            message = f"condition {describe_condition(condition)} is unresolvable: {e.reason}"
            if diagnostics is not None:
                diagnostics.add(DiagnosticKind.UNRESOLVABLE_CONDITION, unit, message)
            else:
                logger.warning(f"[{unit}] {message}")
            return False

    def _evaluate(self, condition: Condition, facts: FactBase, stack: tuple[str, ...]) -> bool:
        match condition:
            case TypePresentCondition(type_name=name):
                return facts.type_exists(name)

            case TypeMissingCondition(type_name=name):
                return not facts.type_exists(name)

            case AnnotationPresentCondition(type_name=name, annotation=annotation):
                if not facts.type_exists(name):
                    raise UnresolvableConditionError(
                        condition, f"type '{name}' is not in the closed world"
                    )
                return facts.annotation_present(name, annotation)

            case PropertyCondition() as prop:
                return self._evaluate_property(prop, facts)

            case UnitCondition(unit=unit_name):
                return self._evaluate_unit(unit_name, facts, stack)

            case AllOfCondition(conditions=conditions):
                return all(self._evaluate(c, facts, stack) for c in conditions)

            case AnyOfCondition(conditions=conditions):
                return any(self._evaluate(c, facts, stack) for c in conditions)

            case NotCondition(condition=inner):
                return not self._evaluate(inner, facts, stack)

            case _:
                raise UnresolvableConditionError(
                    condition, f"unknown condition type: {type(condition).__name__}"
                )

    def _evaluate_property(self, prop: PropertyCondition, facts: FactBase) -> bool:
        """Evaluate a property condition.

        Values compare case-insensitively. A set property with no expected
        value matches unless it is "false".
        """
        value = facts.property_value(prop.key)
        if value is None:
            if prop.match_if_missing is None:
                raise UnresolvableConditionError(
                    prop, f"property '{prop.key}' is not set and match_if_missing is unspecified"
                )
            return prop.match_if_missing

        if prop.having_value is None:
            return value.strip().lower() != "false"
        return value.strip().lower() == prop.having_value.strip().lower()

    def _evaluate_unit(self, unit_name: str, facts: FactBase, stack: tuple[str, ...]) -> bool:
        """Evaluate a unit's own trigger.

        Explicit triggers win over the unit's self-condition; unit-name
        triggers are followed recursively.
        """
        unit = self.units.get(unit_name)
        if unit is None:
            raise UnresolvableConditionError(
                UnitCondition(unit=unit_name), f"unknown configuration unit '{unit_name}'"
            )
        if unit_name in stack:
            chain = " -> ".join((*stack, unit_name))
            raise UnresolvableConditionError(
                UnitCondition(unit=unit_name), f"cyclic unit condition: {chain}"
            )
        stack = (*stack, unit_name)

        if unit.triggers:
            for trigger in unit.triggers:
                if isinstance(trigger, str):
                    if self._evaluate_unit(trigger, facts, stack):
                        return True
                elif self._evaluate(trigger, facts, stack):
                    return True
            return False

        self_condition = unit.self_condition()
        if self_condition is None:
            return True
        return self._evaluate(self_condition, facts, stack)
