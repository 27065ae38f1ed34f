"""Tests for the end-to-end resolution pipeline."""

from src.hints.diagnostics import DiagnosticKind
from src.hints.model import (
    AccessLevel,
    AnnotationPresentCondition,
    ConfigurationUnit,
    HintRecord,
    TypePresentCondition,
    UnitKind,
)
from src.hints.pipeline import ResolutionPipeline, resolve_hints
from src.hints.resolver import ActivationReason
from tests.conftest import make_facts, make_registry, request


class TestResolutionPipeline:
    def test_scenario_with_trigger_present(self, scenario_registry, foo_present):
        resolution = resolve_hints(scenario_registry, foo_present)

        assert set(resolution.active_set) == {"Root", "ConfigA", "ConfigB"}
        assert resolution.access_map["com.example.TypeX"] == (
            AccessLevel.PUBLIC_METHODS | AccessLevel.PUBLIC_CONSTRUCTORS
        )
        assert resolution.diagnostics == ()

    def test_scenario_with_trigger_absent(self, scenario_registry, foo_absent):
        resolution = resolve_hints(scenario_registry, foo_absent)
        assert set(resolution.active_set) == {"Root"}
        assert "com.example.TypeX" not in resolution.access_map

    def test_resolution_is_cached(self, scenario_registry, foo_present):
        pipeline = ResolutionPipeline(scenario_registry, foo_present)
        assert pipeline.run() is pipeline.run()
        assert pipeline.resolution is pipeline.run()

    def test_repeated_runs_are_identical(self, scenario_registry, foo_present):
        first = resolve_hints(scenario_registry, foo_present)
        second = resolve_hints(scenario_registry, foo_present)
        assert first.access_map == second.access_map
        assert first.active_set.units == second.active_set.units


class TestExplain:
    def test_explain_lists_contributing_units_with_paths(self, scenario_registry, foo_present):
        traces = resolve_hints(scenario_registry, foo_present).explain("com.example.TypeX")

        assert [t.unit for t in traces] == ["ConfigA", "ConfigB"]
        config_b = traces[1]
        assert [a.unit for a in config_b.path] == ["ConfigA", "ConfigB"]
        assert config_b.path[-1].reason == ActivationReason.IMPORTED
        assert str(config_b) == "ConfigA (condition) -> ConfigB (imported by ConfigA)"

    def test_explain_unknown_type_is_empty(self, scenario_registry, foo_present):
        assert resolve_hints(scenario_registry, foo_present).explain("a.Unknown") == []


class TestPipelineDiagnostics:
    def test_problems_from_every_phase_are_collected(self):
        registry = make_registry(
            units=[
                ConfigurationUnit(name="Root", imports=("Ghost",)),
                ConfigurationUnit(
                    name="Guarded",
                    trigger=AnnotationPresentCondition(type_name="a.Missing", annotation="a.Marker"),
                ),
            ],
            records=[
                HintRecord(unit="Root", requests=(request("a.Gone"),)),
                {"unit": "Root", "requests": []},
            ],
        )
        resolution = resolve_hints(registry, make_facts())
        kinds = {d.kind for d in resolution.diagnostics}

        assert kinds == {
            DiagnosticKind.UNKNOWN_UNIT,
            DiagnosticKind.MALFORMED_HINT_RECORD,
            DiagnosticKind.UNRESOLVABLE_CONDITION,
            DiagnosticKind.DANGLING_TYPE_REFERENCE,
        }
        assert set(resolution.active_set) == {"Root"}
        assert len(resolution.access_map) == 0

    def test_warnings_are_readable(self):
        registry = make_registry(records=[HintRecord(unit="Root", requests=(request("a.Gone"),))])
        [warning] = resolve_hints(registry, make_facts()).warnings
        assert warning == (
            "dangling_type_reference: [Root] type 'a.Gone' is not in the closed world; "
            "request skipped (source: test)"
        )


class TestRecordTriggers:
    def test_overridden_record_leaves_root_and_imports_in_place(self):
        registry = make_registry(
            units=[
                ConfigurationUnit(name="Root", imports=("Imported",)),
                ConfigurationUnit(name="Imported", kind=UnitKind.CONFIGURATION),
            ],
            records=[
                HintRecord(unit="Root", requests=(request("a.Plain"),)),
                HintRecord(
                    unit="Root",
                    trigger=TypePresentCondition(type_name="a.Foo"),
                    requests=(request("a.WithFoo"),),
                ),
                HintRecord(unit="Imported", requests=(request("a.FromImport"),)),
            ],
        )
        facts = make_facts(["a.Plain", "a.WithFoo", "a.FromImport"])
        resolution = resolve_hints(registry, facts)

        assert set(resolution.active_set) == {"Root", "Imported"}
        assert resolution.active_set.activation("Root").reason == ActivationReason.ROOT
        assert list(resolution.access_map) == ["a.FromImport", "a.Plain"]

    def test_record_granted_once_its_trigger_holds(self):
        registry = make_registry(
            records=[
                HintRecord(
                    unit="Root",
                    trigger=TypePresentCondition(type_name="a.Foo"),
                    requests=(request("a.WithFoo"),),
                ),
            ],
        )
        resolution = resolve_hints(registry, make_facts(["a.Foo", "a.WithFoo"]))
        assert resolution.explain("a.WithFoo")[0].unit == "Root"
