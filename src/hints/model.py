"""Data model for type-accessibility hints.

Hints are plain data: configuration units, the conditions that activate
them, and the access requests they contribute. Uses Pydantic for
validation and serialization and discriminated unions for polymorphism.

The model is:
- Immutable (every model is frozen, collections are tuples)
- Serializable to/from JSON (hint databases are JSON documents)
- Free of behaviour beyond normalization; evaluation lives in evaluator.py
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum, IntFlag
from functools import reduce
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    field_validator,
    model_validator,
)

from .facts import TypeHandle

# =============================================================================
# Access levels
# =============================================================================


class AccessLevel(IntFlag):
    """Reflective capabilities granted to a type.

    Levels combine by bitwise union. ALL is the default when a request does
    not say what it needs.
    """

    LOADABLE_AS_RESOURCE = 1
    CLASS_METADATA = 2
    DECLARED_CONSTRUCTORS = 4
    DECLARED_METHODS = 8
    DECLARED_FIELDS = 16
    PUBLIC_CONSTRUCTORS = 32
    PUBLIC_METHODS = 64
    PUBLIC_FIELDS = 128
    ALL = 255

    @classmethod
    def capabilities(cls) -> tuple[AccessLevel, ...]:
        """Single-bit members in bit order (ALL excluded)."""
        return tuple(member for member in cls.__members__.values() if member is not cls.ALL)

    @property
    def names(self) -> list[str]:
        """Capability names in bit order, or ["ALL"] when every bit is set."""
        if self == AccessLevel.ALL:
            return ["ALL"]
        return [member.name for member in AccessLevel.capabilities() if member & self]

    def __str__(self) -> str:
        return "|".join(self.names) or "NONE"

    @classmethod
    def union(cls, levels: Iterable[AccessLevel]) -> AccessLevel:
        return reduce(lambda a, b: a | b, levels, cls(0))

    @classmethod
    def parse(cls, value: Any) -> AccessLevel:
        """Coerce an authoring-time access value.

        Accepts an AccessLevel, an int, a name, an ``"A|B"`` string or a
        list of any of those. None means unspecified and yields ALL. An
        empty level is rejected: a request always grants something.
        """
        if value is None:
            return cls.ALL
        if isinstance(value, bool):
            raise ValueError(f"Invalid access level: {value!r}")
        if isinstance(value, int):
            # Plain int comparison; ~ on a flag only inverts within its own bits
            if int(value) == 0:
                raise ValueError("Empty access level")
            if not 0 < int(value) <= int(cls.ALL):
                raise ValueError(f"Access level out of range: {int(value)}")
            return cls(value)
        if isinstance(value, str):
            parts = [p.strip() for p in value.split("|") if p.strip()]
            if not parts:
                raise ValueError("Empty access level")
            return cls.union(cls._from_name(p) for p in parts)
        if isinstance(value, (list, tuple, set, frozenset)):
            if not value:
                raise ValueError("Empty access level list")
            return cls.union(cls.parse(v) for v in value)
        raise ValueError(f"Invalid access level: {value!r}")

    @classmethod
    def _from_name(cls, name: str) -> AccessLevel:
        member = cls.__members__.get(name.upper())
        if member is None:
            raise ValueError(
                f"Unknown access level: {name}. Known levels: {', '.join(cls.__members__)}"
            )
        return member


AccessLevelField = Annotated[
    AccessLevel,
    PlainValidator(AccessLevel.parse, json_schema_input_type=Union[list[str], str, int]),
    PlainSerializer(lambda level: level.names, return_type=list[str]),
]


# =============================================================================
# Type references
# =============================================================================


def normalize_type_name(value: Any) -> str:
    """Normalize any supported type reference form to its identity string.

    A string name, a TypeHandle and a Python class all map to one name, so
    requests made through different forms deduplicate.
    """
    if isinstance(value, TypeReference):
        return value.name
    if isinstance(value, TypeHandle):
        name = value.name
    elif isinstance(value, type):
        name = f"{value.__module__}.{value.__qualname__}"
    elif isinstance(value, str):
        name = value
    else:
        raise ValueError(f"Unsupported type reference: {value!r}")

    name = name.strip()
    if not name:
        raise ValueError("Type reference has an empty name")
    if any(ch.isspace() for ch in name):
        raise ValueError(f"Type reference contains whitespace: {name!r}")
    return name


class TypeReference(BaseModel):
    """Identity of a type in the closed world."""

    model_config = ConfigDict(frozen=True)

    name: str

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return data
        return {"name": normalize_type_name(data)}

    @field_validator("name")
    @classmethod
    def _normalize(cls, v: str) -> str:
        return normalize_type_name(v)

    @classmethod
    def of(cls, value: Any) -> TypeReference:
        if isinstance(value, TypeReference):
            return value
        return cls.model_validate(value)

    def __str__(self) -> str:
        return self.name


class AccessRequest(BaseModel):
    """A request for reflective access to one type."""

    model_config = ConfigDict(frozen=True)

    type: TypeReference
    access: AccessLevelField = AccessLevel.ALL

    @classmethod
    def of(cls, type_ref: Any, access: Any = None) -> AccessRequest:
        return cls(type=TypeReference.of(type_ref), access=AccessLevel.parse(access))


# =============================================================================
# Conditions (closed-world predicates that evaluate to bool)
# =============================================================================


class TypePresentCondition(BaseModel):
    """The type is loadable in the closed world."""

    model_config = ConfigDict(frozen=True)

    type: Literal["type_present"] = "type_present"
    type_name: str


class TypeMissingCondition(BaseModel):
    """The type is not loadable in the closed world."""

    model_config = ConfigDict(frozen=True)

    type: Literal["type_missing"] = "type_missing"
    type_name: str


class AnnotationPresentCondition(BaseModel):
    """The type carries the annotation (directly or through a supertype)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["annotation_present"] = "annotation_present"
    type_name: str
    annotation: str


class PropertyCondition(BaseModel):
    """A configuration property has a value.

    With no having_value the property must be set to anything but "false".
    match_if_missing decides the outcome when the property is unset; when it
    is not given either, the condition cannot be resolved.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["property"] = "property"
    key: str
    having_value: str | None = None
    match_if_missing: bool | None = None


class UnitCondition(BaseModel):
    """The named configuration unit's own trigger resolves true."""

    model_config = ConfigDict(frozen=True)

    type: Literal["unit_condition"] = "unit_condition"
    unit: str


class AllOfCondition(BaseModel):
    """All conditions must be true."""

    model_config = ConfigDict(frozen=True)

    type: Literal["all_of"] = "all_of"
    conditions: tuple[Condition, ...]


class AnyOfCondition(BaseModel):
    """At least one condition must be true."""

    model_config = ConfigDict(frozen=True)

    type: Literal["any_of"] = "any_of"
    conditions: tuple[Condition, ...]


class NotCondition(BaseModel):
    """Negate a condition."""

    model_config = ConfigDict(frozen=True)

    type: Literal["not"] = "not"
    condition: Condition


# Discriminated union of all condition types
Condition = Annotated[
    TypePresentCondition
    | TypeMissingCondition
    | AnnotationPresentCondition
    | PropertyCondition
    | UnitCondition
    | AllOfCondition
    | AnyOfCondition
    | NotCondition,
    Field(discriminator="type"),
]

# Update forward refs for composite conditions
AllOfCondition.model_rebuild()
AnyOfCondition.model_rebuild()
NotCondition.model_rebuild()

# A trigger is either the name of another unit (activated when that unit
# becomes active) or a condition evaluated against the fact base.
Trigger = Union[str, Condition]


# =============================================================================
# Configuration units and hint records
# =============================================================================


class UnitKind(str, Enum):
    """How a unit without explicit triggers becomes active."""

    HOST = "host"  # plain hint host: root unless it has a condition
    CONFIGURATION = "configuration"  # configuration class: active iff present and its condition holds


def _dedupe(items: Iterable[Any]) -> tuple[Any, ...]:
    seen: list[Any] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return tuple(seen)


class ConfigurationUnit(BaseModel):
    """A named node whose activation gates a set of access requests."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    kind: UnitKind = UnitKind.HOST
    type_name: str | None = None  # Configuration class name, defaults to name
    condition: Condition | None = None
    triggers: tuple[Trigger, ...] = ()
    imports: tuple[str, ...] = ()
    requests: tuple[AccessRequest, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _accept_single_trigger(cls, data: Any) -> Any:
        if isinstance(data, dict) and "trigger" in data:
            data = dict(data)
            trigger = data.pop("trigger")
            if trigger is not None:
                data["triggers"] = (trigger, *data.get("triggers", ()))
        return data

    @field_validator("triggers", "imports")
    @classmethod
    def _unique(cls, v: tuple[Any, ...]) -> tuple[Any, ...]:
        return _dedupe(v)

    @property
    def is_root(self) -> bool:
        """Always active: a host with no triggers and no condition."""
        return self.kind == UnitKind.HOST and not self.triggers and self.condition is None

    @property
    def unit_triggers(self) -> tuple[str, ...]:
        return tuple(t for t in self.triggers if isinstance(t, str))

    @property
    def condition_triggers(self) -> tuple[Condition, ...]:
        return tuple(t for t in self.triggers if not isinstance(t, str))

    def self_condition(self) -> Condition | None:
        """The implicit trigger used when no explicit trigger is declared.

        A configuration class must itself be present; its own condition, if
        any, must also hold. A host has only its condition.
        """
        parts: list[Condition] = []
        if self.kind == UnitKind.CONFIGURATION:
            parts.append(TypePresentCondition(type_name=self.type_name or self.name))
        if self.condition is not None:
            parts.append(self.condition)
        if not parts:
            return None
        if len(parts) == 1:
            return parts[0]
        return AllOfCondition(conditions=tuple(parts))

    def merged_with(self, other: ConfigurationUnit) -> ConfigurationUnit:
        """Accumulate another declaration of the same unit into this one."""
        return self.model_copy(
            update={
                "triggers": _dedupe((*self.triggers, *other.triggers)),
                "imports": _dedupe((*self.imports, *other.imports)),
                "requests": (*self.requests, *other.requests),
            }
        )


class HintRecord(BaseModel):
    """Authoring-time hint: access requests owned by a configuration unit.

    A trigger override gates this record's requests only: they count when
    the owning unit is active and the override holds. Sibling records of
    the same unit are unaffected.
    """

    model_config = ConfigDict(frozen=True)

    unit: str = Field(min_length=1)
    trigger: Trigger | None = None
    requests: tuple[AccessRequest, ...] = Field(min_length=1)
    source: str | None = None


class HintDatabase(BaseModel):
    """A JSON hint database document."""

    units: list[ConfigurationUnit] = Field(default_factory=list)
    records: list[HintRecord] = Field(default_factory=list)
