"""Hint source protocol.

A hint source supplies configuration units and hint records. Sources are
listed explicitly (see HINT_SOURCES) rather than discovered dynamically.
The protocol allows different implementations:
- StaticHintSource: declarative data defined in Python
- JsonHintSource: a hint database document on disk
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

from src.hints.model import ConfigurationUnit, HintRecord

# Entries may be validated models or raw mappings; the registry validates
# raw entries when it is built.
UnitEntry = ConfigurationUnit | Mapping[str, Any]
RecordEntry = HintRecord | Mapping[str, Any]


class HintSource(Protocol):
    """Protocol for a provider of hint data.

    Implementations should:
    - Return finite collections, produced once per build
    - Keep a stable order (correctness does not depend on it, logs do)
    """

    @property
    def name(self) -> str: ...

    def configuration_units(self) -> Iterable[UnitEntry]:
        """Units declared by this source."""
        ...

    def all_hint_records(self) -> Iterable[RecordEntry]:
        """Hint records contributed by this source."""
        ...


class StaticHintSource:
    """In-memory HintSource.

    Usage:
        source = StaticHintSource(
            "my-hints",
            units=[ConfigurationUnit(name="Root")],
            records=[HintRecord(unit="Root", requests=(AccessRequest.of("com.example.Foo"),))],
        )
        registry = HintRegistry.build([source])
    """

    def __init__(
        self,
        name: str,
        units: Sequence[UnitEntry] = (),
        records: Sequence[RecordEntry] = (),
    ) -> None:
        self._name = name
        self._units = tuple(units)
        self._records = tuple(records)

    @property
    def name(self) -> str:
        return self._name

    def configuration_units(self) -> Iterable[UnitEntry]:
        return self._units

    def all_hint_records(self) -> Iterable[RecordEntry]:
        return self._records

    def __repr__(self) -> str:
        return f"StaticHintSource({self._name!r}, units={len(self._units)}, records={len(self._records)})"
