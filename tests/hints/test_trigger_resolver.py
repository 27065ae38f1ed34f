"""Tests for the trigger resolver."""

import random

import pytest

from src.hints.diagnostics import DiagnosticKind, Diagnostics
from src.hints.model import (
    AnnotationPresentCondition,
    ConfigurationUnit,
    NotCondition,
    PropertyCondition,
    TypePresentCondition,
    UnitCondition,
    UnitKind,
)
from src.hints.resolver import ActivationReason, TriggerResolver, resolve_active_set
from tests.conftest import make_facts, make_registry, request

# =============================================================================
# Basic activation
# =============================================================================


class TestActivation:
    def test_trigger_present_activates_unit_and_imports(self, scenario_registry, foo_present):
        active = resolve_active_set(scenario_registry, foo_present)
        assert set(active) == {"Root", "ConfigA", "ConfigB"}

    def test_trigger_absent_leaves_only_root(self, scenario_registry, foo_absent):
        active = resolve_active_set(scenario_registry, foo_absent)
        assert set(active) == {"Root"}

    def test_activation_reasons(self, scenario_registry, foo_present):
        active = resolve_active_set(scenario_registry, foo_present)
        assert active.activation("Root").reason == ActivationReason.ROOT
        assert active.activation("ConfigA").reason == ActivationReason.CONDITION
        imported = active.activation("ConfigB")
        assert imported.reason == ActivationReason.IMPORTED
        assert imported.via == "ConfigA"

    def test_path_walks_back_to_seed(self, scenario_registry, foo_present):
        active = resolve_active_set(scenario_registry, foo_present)
        assert [a.unit for a in active.path("ConfigB")] == ["ConfigA", "ConfigB"]
        assert active.path("Missing") == []

    def test_import_implies_activation_regardless_of_own_trigger(self):
        registry = make_registry(
            units=[
                ConfigurationUnit(name="Root", imports=("Guarded",)),
                ConfigurationUnit(name="Guarded", trigger=TypePresentCondition(type_name="a.Never")),
            ]
        )
        active = resolve_active_set(registry, make_facts())
        assert "Guarded" in active

    def test_unit_trigger_is_followed(self):
        registry = make_registry(
            units=[
                ConfigurationUnit(name="Root"),
                ConfigurationUnit(name="Follower", trigger="Root"),
                ConfigurationUnit(name="Other", trigger="Inactive"),
                ConfigurationUnit(name="Inactive", kind=UnitKind.CONFIGURATION),
            ]
        )
        active = resolve_active_set(registry, make_facts())
        assert set(active) == {"Root", "Follower"}
        assert active.activation("Follower").reason == ActivationReason.TRIGGERED

    def test_configuration_self_condition_seeds(self):
        registry = make_registry(
            units=[
                ConfigurationUnit(
                    name="WebConfig",
                    kind=UnitKind.CONFIGURATION,
                    type_name="a.WebConfig",
                    condition=PropertyCondition(key="web", having_value="servlet"),
                )
            ]
        )
        assert "WebConfig" in resolve_active_set(
            registry, make_facts(["a.WebConfig"], {"web": "servlet"})
        )
        assert "WebConfig" not in resolve_active_set(
            registry, make_facts(["a.WebConfig"], {"web": "reactive"})
        )

    def test_unit_condition_sees_other_units(self):
        registry = make_registry(
            units=[
                ConfigurationUnit(name="Jackson", kind=UnitKind.CONFIGURATION, type_name="a.Mapper"),
                ConfigurationUnit(name="Codecs", condition=UnitCondition(unit="Jackson")),
            ]
        )
        assert set(resolve_active_set(registry, make_facts(["a.Mapper"]))) == {"Jackson", "Codecs"}
        assert set(resolve_active_set(registry, make_facts())) == set()


# =============================================================================
# Cycles and termination
# =============================================================================


class TestCycles:
    def test_mutual_unit_triggers_without_seed_stay_inactive(self):
        registry = make_registry(
            units=[
                ConfigurationUnit(name="A", trigger="B"),
                ConfigurationUnit(name="B", trigger="A"),
            ]
        )
        active = resolve_active_set(registry, make_facts())
        assert set(active) == set()
        assert active.steps == 0

    def test_import_cycle_terminates(self):
        registry = make_registry(
            units=[
                ConfigurationUnit(name="A", imports=("B",)),
                ConfigurationUnit(name="B", kind=UnitKind.CONFIGURATION, imports=("C",)),
                ConfigurationUnit(name="C", kind=UnitKind.CONFIGURATION, imports=("A", "B")),
            ]
        )
        active = resolve_active_set(registry, make_facts())
        assert set(active) == {"A", "B", "C"}
        assert active.steps == 3

    def test_each_unit_processed_at_most_once(self):
        names = [f"U{i}" for i in range(20)]
        units = [
            ConfigurationUnit(name=name, imports=tuple(n for n in names if n != name))
            for name in names
        ]
        registry = make_registry(units=units)
        active = resolve_active_set(registry, make_facts())
        assert len(active) == 20
        assert active.steps <= len(registry)

    def test_unknown_import_ignored(self):
        registry = make_registry(units=[ConfigurationUnit(name="A", imports=("Ghost",))])
        active = resolve_active_set(registry, make_facts())
        assert set(active) == {"A"}


# =============================================================================
# Unresolvable conditions
# =============================================================================


class TestFailClosed:
    def test_unresolvable_trigger_does_not_activate(self):
        unresolvable = AnnotationPresentCondition(type_name="a.Missing", annotation="a.Marker")
        registry = make_registry(
            units=[
                ConfigurationUnit(name="Negated", trigger=NotCondition(condition=unresolvable)),
                ConfigurationUnit(name="Root"),
            ]
        )
        diagnostics = Diagnostics()
        active = TriggerResolver(registry, make_facts(), diagnostics=diagnostics).resolve()

        assert set(active) == {"Root"}
        [diagnostic] = diagnostics.of_kind(DiagnosticKind.UNRESOLVABLE_CONDITION)
        assert diagnostic.unit == "Negated"

    def test_missing_property_without_default_is_reported(self):
        registry = make_registry(
            units=[ConfigurationUnit(name="A", trigger=PropertyCondition(key="unset"))]
        )
        diagnostics = Diagnostics()
        active = TriggerResolver(registry, make_facts(), diagnostics=diagnostics).resolve()
        assert "A" not in active
        assert diagnostics.of_kind(DiagnosticKind.UNRESOLVABLE_CONDITION)


# =============================================================================
# Confluence
# =============================================================================


def _graph_units() -> list[ConfigurationUnit]:
    return [
        ConfigurationUnit(name="Root", imports=("Core",), requests=(request("a.Root"),)),
        ConfigurationUnit(name="Core", kind=UnitKind.CONFIGURATION, imports=("Json",)),
        ConfigurationUnit(name="Json", kind=UnitKind.CONFIGURATION, type_name="a.Mapper"),
        ConfigurationUnit(name="Web", trigger=TypePresentCondition(type_name="a.Servlet"), imports=("Json",)),
        ConfigurationUnit(name="WebExtras", trigger="Web"),
        ConfigurationUnit(name="Xml", trigger=TypePresentCondition(type_name="a.Sax")),
        ConfigurationUnit(name="XmlExtras", trigger="Xml", imports=("Web",)),
        ConfigurationUnit(name="Loop1", trigger="Loop2"),
        ConfigurationUnit(name="Loop2", trigger="Loop1"),
    ]


@pytest.mark.parametrize("seed", range(10))
@pytest.mark.parametrize("types", [["a.Servlet"], ["a.Sax"], [], ["a.Servlet", "a.Sax", "a.Mapper"]])
def test_active_set_independent_of_declaration_order(seed, types):
    facts = make_facts(types)
    expected = resolve_active_set(make_registry(units=_graph_units()), facts).units

    shuffled = _graph_units()
    random.Random(seed).shuffle(shuffled)
    assert resolve_active_set(make_registry(units=shuffled), facts).units == expected


def test_confluence_expected_members():
    active = resolve_active_set(make_registry(units=_graph_units()), make_facts(["a.Sax"]))
    assert set(active) == {"Root", "Core", "Json", "Xml", "XmlExtras", "Web", "WebExtras"}
