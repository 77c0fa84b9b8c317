from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

import redis

from kpi_tracker.api.models import Game, GameSummary, KpiDefinition, KpiEvent, RecordKpiEventRequest
from kpi_tracker.catalog import default_kpis_for_game
from kpi_tracker.core import aggregate, build_summary, validate_event
from kpi_tracker.streams import append_event, read_events


GAMES_SET_KEY = "kpi:games"
GAME_KEY_PREFIX = "kpi:game:"  # + {game_id}


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _game_key(game_id: str) -> str:
    return f"{GAME_KEY_PREFIX}{game_id}"


def _definitions_key(game_id: str) -> str:
    return f"{GAME_KEY_PREFIX}{game_id}:kpis"


def save_game(*, r: redis.Redis, game: Game) -> None:
    r.set(_game_key(game.game_id), game.model_dump_json())
    r.sadd(GAMES_SET_KEY, game.game_id)


def get_game(*, r: redis.Redis, game_id: str) -> Game | None:
    raw = r.get(_game_key(game_id))
    if not raw:
        return None
    return Game.model_validate_json(raw)


def list_games(*, r: redis.Redis) -> list[Game]:
    out: list[Game] = []
    for gid in sorted(r.smembers(GAMES_SET_KEY)):
        game = get_game(r=r, game_id=gid)
        if game is not None:
            out.append(game)
    out.sort(key=lambda g: g.created_at, reverse=True)
    return out


def put_definition(*, r: redis.Redis, definition: KpiDefinition) -> None:
    # RPUSH keeps definitions in the order they were seeded.
    r.rpush(_definitions_key(definition.game_id), definition.model_dump_json())


def query_definitions_by_game(*, r: redis.Redis, game_id: str) -> list[KpiDefinition]:
    raw = r.lrange(_definitions_key(game_id), 0, -1)
    return [KpiDefinition.model_validate_json(item) for item in raw]


def put_event(*, r: redis.Redis, event: KpiEvent) -> str:
    return append_event(r=r, event=event)


def query_events_by_game(*, r: redis.Redis, game_id: str) -> list[KpiEvent]:
    return read_events(r=r, game_id=game_id)


def create_game(
    *,
    r: redis.Redis,
    home_team: str | None = None,
    away_team: str | None = None,
    kickoff_iso: str | None = None,
) -> tuple[Game, list[KpiDefinition]]:
    game = Game(
        game_id=str(uuid4()),
        home_team=home_team or "",
        away_team=away_team or "",
        kickoff_iso=kickoff_iso,
        status="CREATED",
        created_at=_now(),
    )
    definitions = default_kpis_for_game(game.game_id)

    # Game record, games index and the seeded catalog land together or not at all.
    with r.pipeline(transaction=True) as pipe:
        save_game(r=pipe, game=game)
        for d in definitions:
            put_definition(r=pipe, definition=d)
        pipe.execute()

    return game, definitions


def record_kpi_event(*, r: redis.Redis, game_id: str, payload: RecordKpiEventRequest) -> KpiEvent:
    """Validate and append one KPI event.

    Neither the game nor the KPI id is looked up here; unknown references are
    dropped later, at aggregation time.
    """

    validate_event(payload)

    event = KpiEvent(
        game_id=game_id,
        kpi_id=payload.kpi_id or "",
        timestamp=_now(),
        delta=payload.delta,
        toggle_value=payload.toggle_value,
    )
    put_event(r=r, event=event)
    return event


def get_game_summary(*, r: redis.Redis, game_id: str) -> GameSummary:
    # Recomputed from the full log on every call; there is no cached aggregate.
    definitions = query_definitions_by_game(r=r, game_id=game_id)
    events = query_events_by_game(r=r, game_id=game_id)
    return build_summary(game_id, definitions, aggregate(definitions, events))
