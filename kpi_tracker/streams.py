from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Mapping, cast

import redis

from kpi_tracker.api.models import KpiEvent


EVENTS_KEY_PREFIX = "kpi:game:"  # + {game_id}:events


@dataclass(frozen=True, slots=True)
class EventStream:
    """Append-only KPI event log for one game, backed by a Redis Stream."""

    game_id: str

    @property
    def key(self) -> str:
        return f"{EVENTS_KEY_PREFIX}{self.game_id}:events"


def _fields_for_event(event: KpiEvent) -> dict[str, str]:
    fields = {
        "kpi_id": event.kpi_id,
        "ts": event.timestamp.isoformat(),
    }
    if event.delta is not None:
        fields["delta"] = str(event.delta)
    if event.toggle_value is not None:
        fields["toggle_value"] = "true" if event.toggle_value else "false"
    return fields


def _parse_delta(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _parse_toggle(raw: str | None) -> bool | None:
    if raw is None:
        return None
    lowered = raw.strip().casefold()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def _parse_ts(raw: str | None, *, stream_id: str) -> datetime:
    if raw:
        try:
            ts = datetime.fromisoformat(raw)
        except ValueError:
            ts = None
        if ts is not None:
            return ts if ts.tzinfo is not None else ts.replace(tzinfo=UTC)

    # Fall back to the stream id, which is "<ms since epoch>-<seq>".
    ms = int(stream_id.split("-", 1)[0])
    return datetime.fromtimestamp(ms / 1000, tz=UTC)


def event_from_entry(*, game_id: str, stream_id: str, fields: Mapping[str, str]) -> KpiEvent:
    """Rebuild a KpiEvent from a stream entry.

    Unreadable values come back as None rather than raising, so a corrupted
    entry is ignored by aggregation instead of breaking the whole summary.
    """

    return KpiEvent(
        game_id=game_id,
        kpi_id=fields.get("kpi_id", ""),
        timestamp=_parse_ts(fields.get("ts"), stream_id=stream_id),
        delta=_parse_delta(fields.get("delta")),
        toggle_value=_parse_toggle(fields.get("toggle_value")),
    )


def append_event(*, r: redis.Redis, event: KpiEvent) -> str:
    """Append an event to its game's stream and return the stream entry id."""

    stream = EventStream(game_id=event.game_id)
    stream_id = r.xadd(stream.key, _fields_for_event(event))
    return cast(str, stream_id)


def read_events(*, r: redis.Redis, game_id: str) -> list[KpiEvent]:
    """All events for a game, in append order."""

    stream = EventStream(game_id=game_id)
    entries = r.xrange(stream.key, min="-", max="+")
    return [event_from_entry(game_id=game_id, stream_id=sid, fields=fields) for sid, fields in entries]
