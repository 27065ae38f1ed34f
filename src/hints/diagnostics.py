"""Diagnostics collected during registry build and resolution.

Nothing in the engine is fatal. Problems such as unresolvable conditions or
malformed hint records are recorded here, logged as warnings, and the pass
continues with whatever valid hints remain.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class DiagnosticKind(str, Enum):
    """Categories of recoverable problems."""

    UNRESOLVABLE_CONDITION = "unresolvable_condition"
    MALFORMED_HINT_RECORD = "malformed_hint_record"
    DANGLING_TYPE_REFERENCE = "dangling_type_reference"
    UNKNOWN_UNIT = "unknown_unit"
    CONFLICTING_DECLARATION = "conflicting_declaration"


@dataclass(frozen=True)
class Diagnostic:
    """A single reported problem."""

    kind: DiagnosticKind
    unit: str | None  # Configuration unit the problem belongs to, if any
    message: str
    source: str | None = None  # Hint source that supplied the offending entry

    def __str__(self) -> str:
        where = f"[{self.unit}] " if self.unit else ""
        origin = f" (source: {self.source})" if self.source else ""
        return f"{self.kind.value}: {where}{self.message}{origin}"


@dataclass
class Diagnostics:
    """Ordered, de-duplicated collection of diagnostics.

    The same unresolvable condition may be evaluated several times during
    one pass; it is reported once.
    """

    items: list[Diagnostic] = field(default_factory=list)

    def add(
        self,
        kind: DiagnosticKind,
        unit: str | None,
        message: str,
        source: str | None = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(kind=kind, unit=unit, message=message, source=source)
        if diagnostic not in self.items:
            self.items.append(diagnostic)
            logger.warning(str(diagnostic))
        return diagnostic

    def extend(self, other: Diagnostics) -> None:
        for diagnostic in other:
            if diagnostic not in self.items:
                self.items.append(diagnostic)

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.items if d.kind == kind]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)
