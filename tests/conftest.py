"""Shared test fixtures and helpers."""

import pytest

from src.hints.facts import InMemoryFactBase, TypeFacts
from src.hints.model import (
    AccessLevel,
    AccessRequest,
    ConfigurationUnit,
    HintRecord,
    TypePresentCondition,
    UnitKind,
)
from src.hints.registry import HintRegistry
from src.hints.sources import StaticHintSource


def make_facts(
    types: list[str] | dict[str, TypeFacts] | None = None,
    properties: dict[str, str] | None = None,
) -> InMemoryFactBase:
    """Build a fact base from a list of type names or full type facts."""
    return InMemoryFactBase(types=types or {}, properties=properties or {})


def make_registry(units=(), records=(), name: str = "test") -> HintRegistry:
    """Build a registry from a single static source."""
    return HintRegistry.build([StaticHintSource(name, units=list(units), records=list(records))])


def request(type_name: str, access=None) -> AccessRequest:
    return AccessRequest.of(type_name, access)


@pytest.fixture
def scenario_units() -> list[ConfigurationUnit]:
    """Root, ConfigA (triggered by TypeFoo, imports ConfigB), ConfigB (import only)."""
    return [
        ConfigurationUnit(name="Root", requests=(request("com.example.RootType"),)),
        ConfigurationUnit(
            name="ConfigA",
            trigger=TypePresentCondition(type_name="com.example.TypeFoo"),
            imports=("ConfigB",),
        ),
        ConfigurationUnit(name="ConfigB", kind=UnitKind.CONFIGURATION),
    ]


@pytest.fixture
def scenario_records() -> list[HintRecord]:
    """TypeX requested with different levels from ConfigA and ConfigB."""
    return [
        HintRecord(unit="ConfigA", requests=(request("com.example.TypeX", AccessLevel.PUBLIC_METHODS),)),
        HintRecord(
            unit="ConfigB",
            requests=(request("com.example.TypeX", AccessLevel.PUBLIC_CONSTRUCTORS),),
        ),
    ]


@pytest.fixture
def scenario_registry(scenario_units, scenario_records) -> HintRegistry:
    return make_registry(scenario_units, scenario_records)


@pytest.fixture
def foo_present() -> InMemoryFactBase:
    return make_facts(["com.example.TypeFoo", "com.example.TypeX", "com.example.RootType"])


@pytest.fixture
def foo_absent() -> InMemoryFactBase:
    return make_facts(["com.example.TypeX", "com.example.RootType"])
