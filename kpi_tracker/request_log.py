from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from fastapi import HTTPException, status


logger = logging.getLogger("kpi_tracker.requests")


@dataclass(slots=True)
class RequestLog:
    """One structured log line per handled request."""

    handler: str
    request_id: str
    game_id: str | None = None
    status_code: int = status.HTTP_200_OK
    started: float = field(default_factory=time.monotonic)

    def record(self, *, error_type: str | None = None, error_message: str | None = None) -> dict[str, Any]:
        rec: dict[str, Any] = {
            "requestId": self.request_id,
            "handler": self.handler,
        }
        if self.game_id is not None:
            rec["gameId"] = self.game_id
        rec["status"] = "ok" if self.status_code < 400 else "error"
        rec["statusCode"] = self.status_code
        rec["durationMs"] = int((time.monotonic() - self.started) * 1000)
        if error_type is not None:
            rec["errorType"] = error_type
        if error_message is not None:
            rec["errorMessage"] = error_message
        return rec


def _emit(level: int, rec: dict[str, Any]) -> None:
    logger.log(level, json.dumps(rec, default=str))


@contextmanager
def log_request(
    handler: str,
    *,
    game_id: str | None = None,
    request_id: str | None = None,
    status_code: int = status.HTTP_200_OK,
) -> Iterator[RequestLog]:
    """Time a handler and log its outcome; exceptions are logged and re-raised."""

    entry = RequestLog(handler=handler, request_id=request_id or uuid4().hex, game_id=game_id, status_code=status_code)
    try:
        yield entry
    except HTTPException as e:
        entry.status_code = e.status_code
        level = logging.WARNING if e.status_code < 500 else logging.ERROR
        if e.status_code == status.HTTP_404_NOT_FOUND:
            error_type = "NotFound"
        elif e.status_code < 500:
            error_type = "Validation"
        else:
            error_type = type(e.__cause__ or e).__name__
        _emit(level, entry.record(error_type=error_type, error_message=str(e.detail)))
        raise
    except Exception as e:
        entry.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        _emit(logging.ERROR, entry.record(error_type=type(e).__name__, error_message=str(e)))
        raise
    else:
        _emit(logging.INFO, entry.record())


def describe_validation_errors(errors: Sequence[Mapping[str, Any]]) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', '')}" if loc else str(err.get("msg", "")))
    return "; ".join(parts)


def log_rejected_request(
    handler: str,
    *,
    game_id: str | None = None,
    request_id: str | None = None,
    status_code: int = status.HTTP_422_UNPROCESSABLE_ENTITY,
    error_message: str | None = None,
) -> None:
    """Log a request refused before its handler ran (malformed body, wrong types)."""

    entry = RequestLog(handler=handler, request_id=request_id or uuid4().hex, game_id=game_id, status_code=status_code)
    _emit(logging.WARNING, entry.record(error_type="Validation", error_message=error_message))
