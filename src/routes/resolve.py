"""Hint resolution routes."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from src.hints.errors import HintSourceError
from src.hints.facts import InMemoryFactBase
from src.hints.pipeline import resolve_hints
from src.hints.registry import HintRegistry
from src.hints.sources import HINT_SOURCES, HintSource, StaticHintSource, load_sources

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/hints", tags=["hints"])


class HintDatabasePayload(BaseModel):
    """Hint database entries, validated one by one during registry build.

    Entries stay raw here so a malformed record is reported in the response
    instead of rejecting the whole request.
    """

    units: list[dict[str, Any]] = Field(default_factory=list)
    records: list[dict[str, Any]] = Field(default_factory=list)


class ResolveRequestModel(BaseModel):
    """Request to resolve hints against a fact base snapshot."""

    facts: InMemoryFactBase
    database: HintDatabasePayload = Field(default_factory=HintDatabasePayload)
    sources: list[str] = Field(default_factory=list)  # Built-in sources to include


class ActiveUnitModel(BaseModel):
    unit: str
    reason: str
    via: str | None = None


class AccessEntryModel(BaseModel):
    type: str
    access: list[str]
    units: list[str]


class DiagnosticModel(BaseModel):
    kind: str
    unit: str | None = None
    message: str
    source: str | None = None


class ResolveResponseModel(BaseModel):
    """Resolved access map, active units and reported problems."""

    active_units: list[ActiveUnitModel]
    access: list[AccessEntryModel]
    diagnostics: list[DiagnosticModel]


class SourceModel(BaseModel):
    name: str
    units: int
    records: int


@router.post("/resolve", response_model=ResolveResponseModel)
async def resolve(request: ResolveRequestModel) -> ResolveResponseModel:
    """Resolve hints for the given closed world.

    Built-in sources named in ``sources`` are combined with the inline
    database. Unknown source names are rejected with 400.
    """
    try:
        sources: list[HintSource] = load_sources(request.sources)
    except HintSourceError as e:
        raise HTTPException(status_code=400, detail=str(e))

    sources.append(
        StaticHintSource("request", units=request.database.units, records=request.database.records)
    )
    registry = HintRegistry.build(sources)
    resolution = resolve_hints(registry, request.facts)
    logger.info(
        f"Resolved {len(resolution.access_map)} types from {len(resolution.active_set)} active units"
    )

    active_set = resolution.active_set
    return ResolveResponseModel(
        active_units=[
            ActiveUnitModel(
                unit=unit,
                reason=active_set.activation(unit).reason.value,
                via=active_set.activation(unit).via,
            )
            for unit in active_set
        ],
        access=[AccessEntryModel(**entry.as_dict()) for entry in resolution.access_map.entries()],
        diagnostics=[
            DiagnosticModel(kind=d.kind.value, unit=d.unit, message=d.message, source=d.source)
            for d in resolution.diagnostics
        ],
    )


@router.get("/sources", response_model=list[SourceModel])
async def list_sources() -> list[SourceModel]:
    """List built-in hint sources."""
    result = []
    for name, factory in HINT_SOURCES.items():
        source = factory()
        result.append(
            SourceModel(
                name=name,
                units=len(list(source.configuration_units())),
                records=len(list(source.all_hint_records())),
            )
        )
    return result
