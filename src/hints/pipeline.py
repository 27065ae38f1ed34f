"""Hint resolution pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

from .aggregator import AccessAggregator, ResolvedAccessMap
from .diagnostics import Diagnostic, Diagnostics
from .evaluator import ConditionEvaluator
from .facts import FactBase
from .registry import HintRegistry
from .resolver import Activation, ActiveSet, TriggerResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnitTrace:
    """One unit that contributed access to a type, and how it became active."""

    unit: str
    path: tuple[Activation, ...]

    def __str__(self) -> str:
        return " -> ".join(str(a) for a in self.path)


@dataclass(frozen=True)
class Resolution:
    """Everything one resolution pass produced."""

    active_set: ActiveSet
    access_map: ResolvedAccessMap
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)

    def explain(self, type_ref: Any) -> list[UnitTrace]:
        """Which active units caused this type's inclusion, and why they are active."""
        return [
            UnitTrace(unit=unit, path=tuple(self.active_set.path(unit)))
            for unit in self.access_map.contributors(type_ref)
        ]

    @property
    def warnings(self) -> list[str]:
        return [str(d) for d in self.diagnostics]


class ResolutionPipeline:
    """Resolves hints for one build.

    Pipeline order:
    1. Resolve the active set (trigger resolver)
    2. Aggregate access requests of active units

    The result is computed once and cached for the rest of the build.
    """

    def __init__(
        self,
        registry: HintRegistry,
        facts: FactBase,
        evaluator: ConditionEvaluator | None = None,
    ):
        self.registry = registry
        self.facts = facts
        self.evaluator = evaluator or ConditionEvaluator(registry.units)

    @cached_property
    def resolution(self) -> Resolution:
        diagnostics = Diagnostics()
        diagnostics.extend(self.registry.diagnostics)

        # Phase 1: active set
        resolver = TriggerResolver(self.registry, self.facts, self.evaluator, diagnostics)
        active_set = resolver.resolve()

        # Phase 2: access map
        aggregator = AccessAggregator(self.facts, diagnostics, self.evaluator)
        access_map = aggregator.aggregate(self.registry, active_set)

        if diagnostics:
            logger.warning(f"Hint resolution finished with {len(diagnostics)} problems")
        return Resolution(
            active_set=active_set,
            access_map=access_map,
            diagnostics=tuple(diagnostics),
        )

    def run(self) -> Resolution:
        return self.resolution


def resolve_hints(registry: HintRegistry, facts: FactBase) -> Resolution:
    """Convenience function to run the whole pipeline."""
    return ResolutionPipeline(registry, facts).run()
