from __future__ import annotations

import redis

from kpi_tracker.infra.settings import get_redis_timeout_s, get_redis_url


def create_redis() -> redis.Redis:
    """One client per request; summaries and event writes are single round trips."""

    # decode_responses=True => stream fields and JSON come back as str
    return redis.Redis.from_url(
        get_redis_url(),
        decode_responses=True,
        socket_timeout=get_redis_timeout_s(),
        socket_connect_timeout=get_redis_timeout_s(),
    )
