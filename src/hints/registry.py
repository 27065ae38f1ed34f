"""Hint registry: the frozen collection of units and records for one build.

The registry is assembled from an explicit list of hint sources before
resolution starts and is read-only afterwards. Building it is where
authoring-time entries are validated: a malformed entry is reported and
skipped so the remaining hints still take effect.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from .diagnostics import DiagnosticKind, Diagnostics
from .model import ConfigurationUnit, HintDatabase, HintRecord, Trigger
from .sources.base import HintSource, StaticHintSource
from .visitors import UnitReferenceCollector

logger = logging.getLogger(__name__)


class HintRegistry:
    """Read-only view of configuration units and the hint records they own.

    Units declared inline with requests contribute those requests as an
    implicit record, so aggregation only ever walks records.
    """

    def __init__(
        self,
        units: Mapping[str, ConfigurationUnit],
        records: Iterable[HintRecord],
        diagnostics: Diagnostics | None = None,
    ):
        self._units: Mapping[str, ConfigurationUnit] = MappingProxyType(dict(units))
        self._records: tuple[HintRecord, ...] = tuple(records)
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

        by_unit: dict[str, list[HintRecord]] = {}
        for record in self._records:
            by_unit.setdefault(record.unit, []).append(record)
        self._records_by_unit: Mapping[str, tuple[HintRecord, ...]] = MappingProxyType(
            {name: tuple(recs) for name, recs in by_unit.items()}
        )

        # Reverse trigger edges: unit -> units whose explicit trigger names it
        triggered: dict[str, set[str]] = {}
        for unit in self._units.values():
            for trigger_unit in unit.unit_triggers:
                triggered.setdefault(trigger_unit, set()).add(unit.name)
        self._triggered_by: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {name: tuple(sorted(names)) for name, names in triggered.items()}
        )

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def build(cls, sources: Iterable[HintSource], diagnostics: Diagnostics | None = None) -> HintRegistry:
        """Collect and validate hint data from every source.

        All unit declarations are processed before any record, so a record
        only creates an implicit host unit when no source declares the unit.
        """
        builder = _RegistryBuilder(diagnostics if diagnostics is not None else Diagnostics())
        sources = list(sources)

        for source in sources:
            for entry in source.configuration_units():
                builder.add_unit(entry, source.name)
        for source in sources:
            for entry in source.all_hint_records():
                builder.add_record(entry, source.name)

        registry = builder.finish()
        logger.info(
            f"Built hint registry from {len(sources)} sources: "
            f"{len(registry.units)} units, {len(registry.records)} records, "
            f"{len(registry.diagnostics)} problems"
        )
        return registry

    @classmethod
    def from_database(cls, database: HintDatabase, name: str = "database") -> HintRegistry:
        return cls.build([StaticHintSource(name, units=database.units, records=database.records)])

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def units(self) -> Mapping[str, ConfigurationUnit]:
        return self._units

    @property
    def records(self) -> tuple[HintRecord, ...]:
        return self._records

    def unit(self, name: str) -> ConfigurationUnit:
        unit = self._units.get(name)
        if unit is None:
            raise KeyError(f"Unknown configuration unit: {name}")
        return unit

    def records_for(self, unit: str) -> tuple[HintRecord, ...]:
        return self._records_by_unit.get(unit, ())

    def triggered_by(self, unit: str) -> tuple[str, ...]:
        """Units whose explicit trigger is the given unit."""
        return self._triggered_by.get(unit, ())

    def __contains__(self, name: object) -> bool:
        return name in self._units

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._units))

    def __len__(self) -> int:
        return len(self._units)


class _RegistryBuilder:
    """Accumulates declarations from all sources, then freezes them."""

    def __init__(self, diagnostics: Diagnostics) -> None:
        self.diagnostics = diagnostics
        self.units: dict[str, ConfigurationUnit] = {}
        self.unit_sources: dict[str, str] = {}
        self.records: list[HintRecord] = []

    def add_unit(self, entry: Any, source: str) -> None:
        try:
            unit = ConfigurationUnit.model_validate(entry)
        except ValidationError as e:
            self._report_malformed(entry, "unit", source, e)
            return

        existing = self.units.get(unit.name)
        if existing is None:
            self.units[unit.name] = unit
            self.unit_sources[unit.name] = source
            return

        # Same unit declared twice: triggers, imports and requests accumulate;
        # identity attributes must agree, first declaration wins
        for attr in ("kind", "type_name", "condition"):
            if getattr(existing, attr) != getattr(unit, attr):
                self.diagnostics.add(
                    DiagnosticKind.CONFLICTING_DECLARATION,
                    unit.name,
                    f"conflicting '{attr}' in repeated declaration; keeping the first",
                    source=source,
                )
        self.units[unit.name] = existing.merged_with(unit)

    def add_record(self, entry: Any, source: str) -> None:
        try:
            record = HintRecord.model_validate(entry)
        except ValidationError as e:
            self._report_malformed(entry, "record", source, e)
            return

        if record.source is None:
            record = record.model_copy(update={"source": source})

        if record.unit not in self.units:
            logger.debug(f"Record for undeclared unit {record.unit}; declaring it as a hint host")
            self.units[record.unit] = ConfigurationUnit(name=record.unit)
            self.unit_sources[record.unit] = source
        # A trigger override stays on the record and gates only its own
        # requests; sibling records of the unit are unaffected
        self.records.append(record)

    def finish(self) -> HintRegistry:
        records: list[HintRecord] = []
        for unit in self.units.values():
            if unit.requests:
                records.append(
                    HintRecord(
                        unit=unit.name,
                        requests=unit.requests,
                        source=self.unit_sources.get(unit.name),
                    )
                )
        records.extend(self.records)

        self._check_references()
        return HintRegistry(self.units, records, self.diagnostics)

    def _check_references(self) -> None:
        for unit in self.units.values():
            for imported in unit.imports:
                if imported not in self.units:
                    self._report_unknown(unit.name, f"imports unknown unit '{imported}'")
            for trigger in unit.triggers:
                self._check_trigger(unit.name, trigger, "")
            if unit.condition is not None:
                for ref in sorted(UnitReferenceCollector().visit(unit.condition)):
                    if ref not in self.units:
                        self._report_unknown(unit.name, f"condition references unknown unit '{ref}'")
        for record in self.records:
            if record.trigger is not None:
                self._check_trigger(record.unit, record.trigger, "record ", record.source)

    def _check_trigger(self, unit: str, trigger: Trigger, what: str, source: str | None = None) -> None:
        if isinstance(trigger, str):
            if trigger not in self.units:
                self._report_unknown(unit, f"{what}triggered by unknown unit '{trigger}'", source)
            return
        for ref in sorted(UnitReferenceCollector().visit(trigger)):
            if ref not in self.units:
                self._report_unknown(unit, f"{what}trigger references unknown unit '{ref}'", source)

    def _report_unknown(self, unit: str, message: str, source: str | None = None) -> None:
        self.diagnostics.add(DiagnosticKind.UNKNOWN_UNIT, unit, message, source=source)

    def _report_malformed(self, entry: Any, what: str, source: str, error: ValidationError) -> None:
        owner = None
        if isinstance(entry, Mapping):
            owner = entry.get("unit") if what == "record" else entry.get("name")
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or what}: {err['msg']}" for err in error.errors()
        )
        self.diagnostics.add(
            DiagnosticKind.MALFORMED_HINT_RECORD,
            owner if isinstance(owner, str) else None,
            f"skipped malformed {what}: {problems}",
            source=source,
        )
