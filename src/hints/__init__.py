"""Reflective-access hint resolution for native-image builds.

Decides which types keep reflective access after ahead-of-time compilation
of a Spring application into a closed-world binary.

The resolution pipeline:
  1. Hint sources → HintRegistry (validated, frozen units and records)
  2. HintRegistry + FactBase → TriggerResolver → ActiveSet
  3. ActiveSet → AccessAggregator → ResolvedAccessMap (type → AccessLevel)
"""

from .model import (
    AccessLevel,
    AccessRequest,
    ConfigurationUnit,
    HintDatabase,
    HintRecord,
    TypeReference,
    UnitKind,
)
from .facts import FactBase, InMemoryFactBase, TypeFacts, TypeHandle, load_fact_base
from .diagnostics import Diagnostic, DiagnosticKind, Diagnostics
from .evaluator import ConditionEvaluator
from .registry import HintRegistry
from .resolver import Activation, ActivationReason, ActiveSet, TriggerResolver
from .aggregator import AccessAggregator, ResolvedAccessMap, merge_requests
from .pipeline import Resolution, ResolutionPipeline, resolve_hints

__all__ = [
    "AccessAggregator",
    "AccessLevel",
    "AccessRequest",
    "Activation",
    "ActivationReason",
    "ActiveSet",
    "ConditionEvaluator",
    "ConfigurationUnit",
    "Diagnostic",
    "DiagnosticKind",
    "Diagnostics",
    "FactBase",
    "HintDatabase",
    "HintRecord",
    "HintRegistry",
    "InMemoryFactBase",
    "Resolution",
    "ResolutionPipeline",
    "ResolvedAccessMap",
    "TriggerResolver",
    "TypeFacts",
    "TypeHandle",
    "TypeReference",
    "UnitKind",
    "load_fact_base",
    "merge_requests",
    "resolve_hints",
]
