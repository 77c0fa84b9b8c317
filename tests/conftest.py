from __future__ import annotations

from collections.abc import Generator

import fakeredis
import pytest
from fastapi.testclient import TestClient

from kpi_tracker.api.deps import get_redis
from kpi_tracker.main import app


@pytest.fixture()
def fake_redis() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def client_and_redis(fake_redis: fakeredis.FakeRedis) -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    """FastAPI TestClient wired to an in-memory fakeredis instead of a live Redis."""

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield fake_redis

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, fake_redis
    app.dependency_overrides.clear()


@pytest.fixture()
def client(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> TestClient:
    return client_and_redis[0]
