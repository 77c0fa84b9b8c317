from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KpiKind(StrEnum):
    COUNTER = "COUNTER"
    TOGGLE = "TOGGLE"


class KpiDefinition(CamelModel):
    model_config = ConfigDict(frozen=True)

    game_id: str
    kpi_id: str
    label: str
    # Stored and served as "type" to stay compatible with existing clients.
    kind: KpiKind = Field(..., alias="type")


class KpiEvent(CamelModel):
    model_config = ConfigDict(frozen=True)

    game_id: str
    kpi_id: str
    timestamp: datetime

    # As recorded. Either may be None when the stored value was unreadable.
    delta: int | None = None
    toggle_value: bool | None = None


class KpiSummary(CamelModel):
    kpi_id: str
    label: str

    # Exactly one is set: total for counters, value for toggles.
    total: int | None = None
    value: bool | None = None


class GameSummary(CamelModel):
    game_id: str
    kpis: list[KpiSummary] = Field(default_factory=list)


class Game(CamelModel):
    game_id: str
    home_team: str = ""
    away_team: str = ""
    kickoff_iso: str | None = None
    status: str = "CREATED"
    created_at: datetime


class GameCreateRequest(CamelModel):
    home_team: str | None = None
    away_team: str | None = None
    kickoff_iso: str | None = None


class RecordKpiEventRequest(CamelModel):
    # Everything optional here; rule checks live in kpi_tracker.core.validation
    # so the client gets the same messages regardless of which field is off.
    kpi_id: str | None = None
    # Strict: true, "1" or "yes" are refused rather than coerced.
    delta: StrictInt | None = None
    toggle_value: StrictBool | None = None


class CreateGameResponse(CamelModel):
    game_id: str
    kpis: list[KpiDefinition]


class KpiDefinitionListResponse(CamelModel):
    kpis: list[KpiDefinition]


class GameListResponse(CamelModel):
    games: list[Game]


class RecordKpiEventResponse(CamelModel):
    status: str = "OK"
