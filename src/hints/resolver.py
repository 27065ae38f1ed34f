"""Trigger resolver: computes the set of active configuration units.

Worklist fixed point over the import/trigger graph:

  1. Seed with every directly active unit: roots, and units whose condition
     trigger (or, without explicit triggers, self-condition) holds.
  2. Pop a unit and mark it active. Enqueue every unit it imports and every
     unit whose explicit trigger names it, unless already seen.
  3. Stop when the worklist is empty.

Each unit moves UNSEEN -> ENQUEUED -> ACTIVE at most once, so the loop runs
at most len(units) times and cyclic graphs terminate. Import implies
activation regardless of the imported unit's own trigger.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from .diagnostics import Diagnostics
from .evaluator import ConditionEvaluator
from .facts import FactBase
from .model import ConfigurationUnit
from .registry import HintRegistry

logger = logging.getLogger(__name__)


class UnitState(str, Enum):
    """Per-unit resolution state."""

    UNSEEN = "unseen"
    ENQUEUED = "enqueued"
    ACTIVE = "active"


class ActivationReason(str, Enum):
    """Why a unit entered the active set."""

    ROOT = "root"  # no trigger, always active
    CONDITION = "condition"  # trigger condition or self-condition holds
    TRIGGERED = "triggered"  # its explicit trigger unit became active
    IMPORTED = "imported"  # imported by an active unit


@dataclass(frozen=True)
class Activation:
    """How one unit was reached."""

    unit: str
    reason: ActivationReason
    via: str | None = None  # Importing or triggering unit

    def __str__(self) -> str:
        if self.via is None:
            return f"{self.unit} ({self.reason.value})"
        return f"{self.unit} ({self.reason.value} by {self.via})"


@dataclass(frozen=True)
class ActiveSet:
    """The units judged active for this build, with the reason for each.

    A set, not a sequence: iteration is sorted by name.
    """

    activations: Mapping[str, Activation] = field(default_factory=dict)
    steps: int = 0  # Units processed by the worklist

    @property
    def units(self) -> frozenset[str]:
        return frozenset(self.activations)

    def activation(self, unit: str) -> Activation | None:
        return self.activations.get(unit)

    def path(self, unit: str) -> list[Activation]:
        """Chain of activations from a seed unit down to the given unit."""
        chain: list[Activation] = []
        seen: set[str] = set()
        current = self.activations.get(unit)
        while current is not None and current.unit not in seen:
            chain.append(current)
            seen.add(current.unit)
            current = self.activations.get(current.via) if current.via else None
        chain.reverse()
        return chain

    def __contains__(self, unit: object) -> bool:
        return unit in self.activations

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.activations))

    def __len__(self) -> int:
        return len(self.activations)


class TriggerResolver:
    """Resolves the active set for one registry and fact base.

    Usage:
        resolver = TriggerResolver(registry, facts)
        active = resolver.resolve()
        "JacksonAutoConfiguration" in active
    """

    def __init__(
        self,
        registry: HintRegistry,
        facts: FactBase,
        evaluator: ConditionEvaluator | None = None,
        diagnostics: Diagnostics | None = None,
    ):
        self.registry = registry
        self.facts = facts
        self.evaluator = evaluator or ConditionEvaluator(registry.units)
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def resolve(self) -> ActiveSet:
        """Run the worklist to a fixed point."""
        units = self.registry.units
        states: dict[str, UnitState] = {name: UnitState.UNSEEN for name in units}
        activations: dict[str, Activation] = {}
        worklist: deque[Activation] = deque()

        def enqueue(activation: Activation) -> None:
            if states.get(activation.unit) is not UnitState.UNSEEN:
                return
            states[activation.unit] = UnitState.ENQUEUED
            worklist.append(activation)

        # Phase 1: seed with directly active units
        for name in sorted(units):
            reason = self._seed_reason(units[name])
            if reason is not None:
                enqueue(Activation(unit=name, reason=reason))

        # Phase 2: propagate along import and trigger edges
        steps = 0
        while worklist:
            activation = worklist.popleft()
            steps += 1
            states[activation.unit] = UnitState.ACTIVE
            activations[activation.unit] = activation
            logger.debug(f"Active: {activation}")

            unit = units[activation.unit]
            for imported in unit.imports:
                if imported in units:
                    enqueue(Activation(imported, ActivationReason.IMPORTED, via=unit.name))
            for dependent in self.registry.triggered_by(unit.name):
                enqueue(Activation(dependent, ActivationReason.TRIGGERED, via=unit.name))

        logger.info(f"Resolved {len(activations)} of {len(units)} configuration units active")
        return ActiveSet(activations=MappingProxyType(activations), steps=steps)

    def _seed_reason(self, unit: ConfigurationUnit) -> ActivationReason | None:
        """Whether a unit is active without being imported or triggered by another unit."""
        if unit.triggers:
            # Explicit triggers win over the self-condition. Unit triggers are
            # edges followed in phase 2; only condition triggers can seed.
            for condition in unit.condition_triggers:
                if self.evaluator.evaluate_safely(condition, self.facts, unit.name, self.diagnostics):
                    return ActivationReason.CONDITION
            return None

        if unit.is_root:
            return ActivationReason.ROOT

        self_condition = unit.self_condition()
        if self_condition is not None and self.evaluator.evaluate_safely(
            self_condition, self.facts, unit.name, self.diagnostics
        ):
            return ActivationReason.CONDITION
        return None


def resolve_active_set(registry: HintRegistry, facts: FactBase) -> ActiveSet:
    """Convenience function to resolve the active set."""
    return TriggerResolver(registry, facts).resolve()
