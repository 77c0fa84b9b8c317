from __future__ import annotations

import fakeredis
import pytest
import redis
from fastapi.testclient import TestClient


def _create(client: TestClient, **body: str) -> dict:
    resp = client.post("/games", json=body)
    assert resp.status_code == 201
    return resp.json()


def _kpi(summary: dict, kpi_id: str) -> dict:
    return next(k for k in summary["kpis"] if k["kpiId"] == kpi_id)


def test_health(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_info(client: TestClient) -> None:
    assert client.get("/info").json()["name"] == "soccer-kpi-tracker"


def test_create_game_returns_seeded_kpis(client: TestClient) -> None:
    data = _create(client, homeTeam="Rovers", awayTeam="United", kickoffIso="2025-06-01T15:00:00Z")

    assert data["gameId"]
    assert len(data["kpis"]) == 12
    assert data["kpis"][0] == {
        "gameId": data["gameId"],
        "kpiId": "shots_on_target",
        "label": "Shots on Target",
        "type": "COUNTER",
    }
    assert data["kpis"][-1]["type"] == "TOGGLE"

    game = client.get(f"/games/{data['gameId']}").json()
    assert game["homeTeam"] == "Rovers"
    assert game["awayTeam"] == "United"
    assert game["kickoffIso"] == "2025-06-01T15:00:00Z"
    assert game["status"] == "CREATED"


def test_create_game_without_body(client: TestClient) -> None:
    resp = client.post("/games")
    assert resp.status_code == 201
    game = client.get(f"/games/{resp.json()['gameId']}").json()
    assert game["homeTeam"] == ""
    assert "kickoffIso" not in game


def test_list_games(client: TestClient) -> None:
    gid = _create(client)["gameId"]
    games = client.get("/games").json()["games"]
    assert [g["gameId"] for g in games] == [gid]


def test_get_game_404(client: TestClient) -> None:
    resp = client.get("/games/nope")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Game not found"


def test_get_kpi_definitions(client: TestClient) -> None:
    gid = _create(client)["gameId"]
    kpis = client.get(f"/games/{gid}/kpis").json()["kpis"]
    assert [k["kpiId"] for k in kpis][:3] == ["shots_on_target", "shots_off_target", "goals"]
    assert len(kpis) == 12


def test_record_events_and_summary(client: TestClient) -> None:
    gid = _create(client)["gameId"]

    for delta in (1, 1, -1):
        resp = client.post(f"/games/{gid}/events", json={"kpiId": "goals", "delta": delta})
        assert resp.status_code == 200
        assert resp.json() == {"status": "OK"}

    client.post(f"/games/{gid}/events", json={"kpiId": "red_card", "toggleValue": True})
    client.post(f"/games/{gid}/events", json={"kpiId": "red_card", "toggleValue": False})
    client.post(f"/games/{gid}/events", json={"kpiId": "clean_sheet", "toggleValue": True})

    summary = client.get(f"/games/{gid}/summary").json()
    assert summary["gameId"] == gid
    assert len(summary["kpis"]) == 12
    assert _kpi(summary, "goals") == {"kpiId": "goals", "label": "Goals", "total": 1}
    assert _kpi(summary, "red_card") == {"kpiId": "red_card", "label": "Red Card", "value": False}
    assert _kpi(summary, "clean_sheet")["value"] is True
    assert _kpi(summary, "tackles_won") == {"kpiId": "tackles_won", "label": "Tackles Won", "total": 0}


def test_summary_ignores_unknown_and_mismatched_events(client: TestClient) -> None:
    gid = _create(client)["gameId"]

    assert client.post(f"/games/{gid}/events", json={"kpiId": "corners", "delta": 1}).status_code == 200
    assert client.post(f"/games/{gid}/events", json={"kpiId": "yellow_card", "delta": 1}).status_code == 200
    assert client.post(f"/games/{gid}/events", json={"kpiId": "goals", "toggleValue": True}).status_code == 200

    summary = client.get(f"/games/{gid}/summary").json()
    assert "corners" not in {k["kpiId"] for k in summary["kpis"]}
    assert _kpi(summary, "yellow_card")["value"] is False
    assert _kpi(summary, "goals")["total"] == 0


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ({"delta": 1}, "kpiId is required"),
        ({"kpiId": "", "delta": 1}, "kpiId is required"),
        ({"kpiId": "goals", "delta": 2}, "delta must be 1 or -1 for counter events"),
        ({"kpiId": "goals", "delta": 0}, "delta must be 1 or -1 for counter events"),
        ({"kpiId": "goals", "delta": 1, "toggleValue": True}, "provide either delta or toggleValue, not both"),
        ({"kpiId": "goals"}, "provide either delta or toggleValue"),
    ],
)
def test_record_event_validation_errors(client: TestClient, body: dict, message: str) -> None:
    gid = _create(client)["gameId"]
    resp = client.post(f"/games/{gid}/events", json=body)
    assert resp.status_code == 400
    assert resp.json()["detail"] == message


def test_record_event_requires_body(client: TestClient) -> None:
    resp = client.post("/games/g1/events")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Request body is required"


def test_record_event_wrong_types_is_422(client: TestClient) -> None:
    resp = client.post("/games/g1/events", json={"kpiId": "goals", "delta": "lots"})
    assert resp.status_code == 422


def test_summary_for_unknown_game_is_empty(client: TestClient) -> None:
    resp = client.get("/games/nope/summary")
    assert resp.status_code == 200
    assert resp.json() == {"gameId": "nope", "kpis": []}


def test_storage_failure_maps_to_500(
    client_and_redis: tuple[TestClient, fakeredis.FakeRedis], monkeypatch: pytest.MonkeyPatch
) -> None:
    client, r = client_and_redis

    def _boom(*args: object, **kwargs: object) -> None:
        raise redis.ConnectionError("connection refused")

    monkeypatch.setattr(r, "xadd", _boom)

    resp = client.post("/games/g1/events", json={"kpiId": "goals", "delta": 1})
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to record KPI event: connection refused"


def test_cors_headers(client: TestClient) -> None:
    resp = client.get("/health", headers={"Origin": "http://scorer.local"})
    assert resp.headers["access-control-allow-origin"] == "*"


@pytest.mark.parametrize(
    "body",
    [
        {"kpiId": "goals", "delta": True},
        {"kpiId": "goals", "delta": "1"},
        {"kpiId": "goals", "delta": 1.5},
        {"kpiId": "red_card", "toggleValue": "yes"},
        {"kpiId": "red_card", "toggleValue": 1},
    ],
)
def test_record_event_refuses_coercible_values(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], body: dict) -> None:
    client, r = client_and_redis
    resp = client.post("/games/g1/events", json=body)
    assert resp.status_code == 422
    assert r.xrange("kpi:game:g1:events") == []


def test_create_game_failure_leaves_no_partial_game(
    client_and_redis: tuple[TestClient, fakeredis.FakeRedis], monkeypatch: pytest.MonkeyPatch
) -> None:
    client, r = client_and_redis
    real_pipeline = r.pipeline
    pushes = {"n": 0}

    def _flaky_pipeline(*args: object, **kwargs: object):  # type: ignore[no-untyped-def]
        pipe = real_pipeline(*args, **kwargs)
        real_rpush = pipe.rpush

        def _rpush(*a: object, **kw: object):  # type: ignore[no-untyped-def]
            pushes["n"] += 1
            if pushes["n"] == 5:
                raise redis.ConnectionError("connection reset")
            return real_rpush(*a, **kw)

        pipe.rpush = _rpush
        return pipe

    monkeypatch.setattr(r, "pipeline", _flaky_pipeline)

    resp = client.post("/games", json={"homeTeam": "Rovers"})
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to create game: connection reset"

    assert client.get("/games").json()["games"] == []
    assert r.keys("kpi:*") == []


def test_create_game_failure_on_commit_leaves_no_partial_game(
    client_and_redis: tuple[TestClient, fakeredis.FakeRedis], monkeypatch: pytest.MonkeyPatch
) -> None:
    client, r = client_and_redis
    real_pipeline = r.pipeline

    def _failing_pipeline(*args: object, **kwargs: object):  # type: ignore[no-untyped-def]
        pipe = real_pipeline(*args, **kwargs)

        def _execute(*a: object, **kw: object) -> None:
            raise redis.ConnectionError("connection reset")

        pipe.execute = _execute
        return pipe

    monkeypatch.setattr(r, "pipeline", _failing_pipeline)

    assert client.post("/games").status_code == 500
    assert r.keys("kpi:*") == []
