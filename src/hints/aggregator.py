"""Access aggregator: merges access requests of active units.

Every request for a type is folded into that type's level by bitwise
union, never by overwriting, so the result does not depend on the order in
which units or records are visited. A record that carries its own trigger
is further gated by that trigger.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .diagnostics import DiagnosticKind, Diagnostics
from .evaluator import ConditionEvaluator
from .facts import FactBase
from .model import AccessLevel, AccessRequest, HintRecord, TypeReference
from .registry import HintRegistry
from .visitors import describe_condition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessEntry:
    """Final access for one type and the units that asked for it."""

    type_name: str
    access: AccessLevel
    units: frozenset[str]

    def as_dict(self) -> dict[str, Any]:
        return {
            "type": self.type_name,
            "access": self.access.names,
            "units": sorted(self.units),
        }


class ResolvedAccessMap(Mapping[str, AccessLevel]):
    """Read-only mapping of type name to granted access level.

    Lookups accept anything a TypeReference accepts (name, handle, class).
    A type with no entry gets no reflective access.
    """

    def __init__(self, entries: Mapping[str, AccessEntry]):
        self._entries = dict(entries)

    def __getitem__(self, key: Any) -> AccessLevel:
        return self.entry(key).access

    def __contains__(self, key: object) -> bool:
        return _key(key) in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResolvedAccessMap):
            return self._entries == other._entries
        return super().__eq__(other)

    def __hash__(self) -> int:
        return hash(frozenset(self._entries.items()))

    def entry(self, key: Any) -> AccessEntry:
        name = _key(key)
        if name not in self._entries:
            raise KeyError(key)
        return self._entries[name]

    def entries(self) -> list[AccessEntry]:
        return [self._entries[name] for name in self]

    def contributors(self, key: Any) -> list[str]:
        """Units whose requests produced this type's entry."""
        entry = self._entries.get(_key(key))
        return sorted(entry.units) if entry else []

    def to_text(self, include_units: bool = False) -> str:
        """Stable, diffable dump: one ``name = LEVEL|LEVEL`` line per type, sorted."""
        lines = []
        for entry in self.entries():
            line = f"{entry.type_name} = {str(entry.access)}"
            if include_units:
                line += f"  # {', '.join(sorted(entry.units))}"
            lines.append(line)
        return "\n".join(lines) + ("\n" if lines else "")

    def to_json(self) -> str:
        return json.dumps([entry.as_dict() for entry in self.entries()], indent=2) + "\n"


def _key(value: Any) -> str | None:
    try:
        return TypeReference.of(value).name
    except ValueError:
        return None


def merge_requests(requests: Iterable[AccessRequest]) -> dict[str, AccessLevel]:
    """Fold requests into type -> union of requested levels."""
    levels: dict[str, AccessLevel] = {}
    for request in requests:
        name = request.type.name
        levels[name] = levels.get(name, AccessLevel(0)) | request.access
    return levels


class AccessAggregator:
    """Builds the resolved access map from the active units.

    A record with a trigger override contributes only when its owning unit
    is active and its own trigger holds: a unit name must be in the active
    set, a condition must evaluate true.

    Args:
        facts: When given, requests for types absent from the closed world
            are skipped and reported. Resource-only requests are exempt,
            since resources are not types. Also needed to evaluate condition
            triggers on records.
        diagnostics: Collector for skipped requests and unresolvable triggers
        evaluator: Evaluator for record triggers, defaults to one over the
            registry's units
    """

    def __init__(
        self,
        facts: FactBase | None = None,
        diagnostics: Diagnostics | None = None,
        evaluator: ConditionEvaluator | None = None,
    ):
        self.facts = facts
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.evaluator = evaluator

    def aggregate(self, registry: HintRegistry, active_units: Iterable[str]) -> ResolvedAccessMap:
        """Union the requests of every record owned by an active unit."""
        active = list(active_units)
        active_names = frozenset(active)
        evaluator = self.evaluator or ConditionEvaluator(registry.units)
        levels: dict[str, AccessLevel] = {}
        owners: dict[str, set[str]] = {}

        for unit in active:
            for record in registry.records_for(unit):
                if not self._record_triggered(record, active_names, evaluator):
                    continue
                for request in record.requests:
                    if not self._in_closed_world(request, unit, record.source):
                        continue
                    name = request.type.name
                    levels[name] = levels.get(name, AccessLevel(0)) | request.access
                    owners.setdefault(name, set()).add(unit)

        entries = {
            name: AccessEntry(type_name=name, access=level, units=frozenset(owners[name]))
            for name, level in levels.items()
        }
        logger.info(f"Aggregated reflective access for {len(entries)} types")
        return ResolvedAccessMap(entries)

    def _record_triggered(
        self, record: HintRecord, active: frozenset[str], evaluator: ConditionEvaluator
    ) -> bool:
        trigger = record.trigger
        if trigger is None:
            return True
        if isinstance(trigger, str):
            return trigger in active
        if self.facts is None:
            self.diagnostics.add(
                DiagnosticKind.UNRESOLVABLE_CONDITION,
                record.unit,
                f"record trigger {describe_condition(trigger)} needs a fact base; record skipped",
                source=record.source,
            )
            return False
        return evaluator.evaluate_safely(trigger, self.facts, record.unit, self.diagnostics)

    def _in_closed_world(self, request: AccessRequest, unit: str, source: str | None) -> bool:
        if self.facts is None or request.access == AccessLevel.LOADABLE_AS_RESOURCE:
            return True
        if self.facts.type_exists(request.type.name):
            return True
        self.diagnostics.add(
            DiagnosticKind.DANGLING_TYPE_REFERENCE,
            unit,
            f"type '{request.type.name}' is not in the closed world; request skipped",
            source=source,
        )
        return False
