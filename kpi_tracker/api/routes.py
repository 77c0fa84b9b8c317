from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, status
import redis

from kpi_tracker.api.deps import get_redis
from kpi_tracker.api.models import (
    CreateGameResponse,
    Game,
    GameCreateRequest,
    GameListResponse,
    GameSummary,
    KpiDefinitionListResponse,
    RecordKpiEventRequest,
    RecordKpiEventResponse,
)
from kpi_tracker.core import ValidationError
from kpi_tracker.game_store import (
    create_game,
    get_game,
    get_game_summary,
    list_games,
    query_definitions_by_game,
    record_kpi_event,
)
from kpi_tracker.request_log import log_request

router = APIRouter()


def _storage_failure(action: str, e: redis.RedisError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}: {e}")


@router.get("/health", name="health")
async def health(x_request_id: str | None = Header(default=None)) -> dict[str, str]:
    with log_request("health", request_id=x_request_id):
        return {"status": "ok"}


@router.post("/games", name="createGame", response_model=CreateGameResponse, status_code=status.HTTP_201_CREATED)
async def create_game_route(
    payload: GameCreateRequest | None = None,
    r: redis.Redis = Depends(get_redis),
    x_request_id: str | None = Header(default=None),
) -> CreateGameResponse:
    payload = payload or GameCreateRequest()
    with log_request("createGame", request_id=x_request_id, status_code=status.HTTP_201_CREATED) as log:
        try:
            game, definitions = create_game(
                r=r,
                home_team=payload.home_team,
                away_team=payload.away_team,
                kickoff_iso=payload.kickoff_iso,
            )
        except redis.RedisError as e:
            raise _storage_failure("create game", e) from e
        log.game_id = game.game_id
        return CreateGameResponse(game_id=game.game_id, kpis=definitions)


@router.get("/games", name="listGames", response_model=GameListResponse, response_model_exclude_none=True)
async def list_games_route(
    r: redis.Redis = Depends(get_redis),
    x_request_id: str | None = Header(default=None),
) -> GameListResponse:
    with log_request("listGames", request_id=x_request_id):
        try:
            return GameListResponse(games=list_games(r=r))
        except redis.RedisError as e:
            raise _storage_failure("list games", e) from e


@router.get("/games/{game_id}", name="getGame", response_model=Game, response_model_exclude_none=True)
async def get_game_route(
    game_id: str,
    r: redis.Redis = Depends(get_redis),
    x_request_id: str | None = Header(default=None),
) -> Game:
    with log_request("getGame", game_id=game_id, request_id=x_request_id):
        try:
            game = get_game(r=r, game_id=game_id)
        except redis.RedisError as e:
            raise _storage_failure("load game", e) from e
        if game is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game not found")
        return game


@router.get("/games/{game_id}/kpis", name="getKpiDefinitions", response_model=KpiDefinitionListResponse)
async def get_kpi_definitions_route(
    game_id: str,
    r: redis.Redis = Depends(get_redis),
    x_request_id: str | None = Header(default=None),
) -> KpiDefinitionListResponse:
    with log_request("getKpiDefinitions", game_id=game_id, request_id=x_request_id):
        try:
            return KpiDefinitionListResponse(kpis=query_definitions_by_game(r=r, game_id=game_id))
        except redis.RedisError as e:
            raise _storage_failure("load KPI definitions", e) from e


@router.post("/games/{game_id}/events", name="recordKpiEvent", response_model=RecordKpiEventResponse)
async def record_kpi_event_route(
    game_id: str,
    payload: RecordKpiEventRequest | None = None,
    r: redis.Redis = Depends(get_redis),
    x_request_id: str | None = Header(default=None),
) -> RecordKpiEventResponse:
    with log_request("recordKpiEvent", game_id=game_id, request_id=x_request_id):
        if payload is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body is required")
        try:
            record_kpi_event(r=r, game_id=game_id, payload=payload)
        except ValidationError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        except redis.RedisError as e:
            raise _storage_failure("record KPI event", e) from e
        return RecordKpiEventResponse()


@router.get(
    "/games/{game_id}/summary", name="getGameSummary", response_model=GameSummary, response_model_exclude_none=True
)
async def get_game_summary_route(
    game_id: str,
    r: redis.Redis = Depends(get_redis),
    x_request_id: str | None = Header(default=None),
) -> GameSummary:
    with log_request("getGameSummary", game_id=game_id, request_id=x_request_id):
        try:
            return get_game_summary(r=r, game_id=game_id)
        except redis.RedisError as e:
            raise _storage_failure("calculate game summary", e) from e
