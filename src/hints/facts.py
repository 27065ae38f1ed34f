"""Fact base protocol for the closed world.

The fact base is a read-only snapshot of what exists on the application's
classpath: loadable types, their annotations and supertypes, and the
configuration properties in effect. It is produced by an external classpath
scanner and handed to the engine as materialized data.

The protocol allows different implementations:
- InMemoryFactBase: snapshot loaded from JSON or built in tests
- anything else answering the same three questions with stable answers
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import HintSourceError, UnknownTypeError

logger = logging.getLogger(__name__)


class FactBase(Protocol):
    """Protocol for querying the closed world.

    Implementations must give the same answer for the same question for the
    whole resolution pass.
    """

    def type_exists(self, name: str) -> bool:
        """Whether the fully-qualified type is loadable."""
        ...

    def annotation_present(self, type_name: str, annotation: str) -> bool:
        """Whether the type (or one of its supertypes) carries the annotation."""
        ...

    def property_value(self, key: str) -> str | None:
        """The configured value of a property, or None when unset."""
        ...


@dataclass(frozen=True)
class TypeHandle:
    """A type reference checked against the closed world when it was created.

    Obtain one through InMemoryFactBase.handle(); hint authors use it where
    a typed reference is preferred over a bare string name.
    """

    name: str

    def __str__(self) -> str:
        return self.name


class TypeFacts(BaseModel):
    """What the scanner recorded about one type."""

    model_config = ConfigDict(frozen=True)

    annotations: frozenset[str] = frozenset()
    supertypes: tuple[str, ...] = ()


class InMemoryFactBase(BaseModel):
    """FactBase backed by an in-memory snapshot.

    Usage:
        facts = InMemoryFactBase(
            types={"com.example.Foo": TypeFacts(annotations={"org.example.Marker"})},
            properties={"spring.xml.ignore": "true"},
        )
        facts.type_exists("com.example.Foo")  # True

    ``types`` also accepts a plain list of names when annotations and
    supertypes are irrelevant.
    """

    model_config = ConfigDict(frozen=True)

    types: dict[str, TypeFacts] = Field(default_factory=dict)
    properties: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _accept_type_list(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("types"), (list, tuple, set, frozenset)):
            data = {**data, "types": {name: TypeFacts() for name in data["types"]}}
        return data

    def type_exists(self, name: str) -> bool:
        return name in self.types

    def annotation_present(self, type_name: str, annotation: str) -> bool:
        # Walk the supertype chain; guard against cycles in scanner output
        seen: set[str] = set()
        pending = [type_name]
        while pending:
            current = pending.pop()
            if current in seen:
                continue
            seen.add(current)
            facts = self.types.get(current)
            if facts is None:
                continue
            if annotation in facts.annotations:
                return True
            pending.extend(facts.supertypes)
        return False

    def property_value(self, key: str) -> str | None:
        return self.properties.get(key)

    def handle(self, name: str) -> TypeHandle:
        """Get a typed handle, failing if the type is not in the closed world."""
        if not self.type_exists(name):
            raise UnknownTypeError(f"Type not present in closed world: {name}")
        return TypeHandle(name=name)


def load_fact_base(path: str | Path) -> InMemoryFactBase:
    """Load a fact base snapshot written by the classpath scanner.

    Args:
        path: JSON file with ``types`` and ``properties`` keys

    Returns:
        The frozen snapshot

    Raises:
        HintSourceError: If the file is missing or not valid JSON
    """
    path = Path(path)
    if not path.exists():
        raise HintSourceError(f"Fact base snapshot not found: {path}")
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise HintSourceError(f"Fact base snapshot is not valid JSON: {path}: {e}") from e

    try:
        facts = InMemoryFactBase.model_validate(data)
    except ValidationError as e:
        raise HintSourceError(f"Fact base snapshot is malformed: {path}: {e}") from e

    logger.info(f"Loaded fact base from {path}: {len(facts.types)} types, {len(facts.properties)} properties")
    return facts
