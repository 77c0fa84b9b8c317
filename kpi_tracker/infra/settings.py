from __future__ import annotations

import logging
import os


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def get_redis_timeout_s() -> float:
    raw = os.environ.get("KPI_TRACKER_REDIS_TIMEOUT_S", "5")
    try:
        return float(raw)
    except ValueError:
        return 5.0


def get_log_level() -> int:
    name = os.environ.get("KPI_TRACKER_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    # getLevelName returns "Level X" for unknown names.
    if not isinstance(level, int):
        return logging.INFO
    return level


def get_cors_origins() -> list[str]:
    raw = os.environ.get("KPI_TRACKER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]
