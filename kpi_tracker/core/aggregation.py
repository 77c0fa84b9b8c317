from __future__ import annotations

from collections.abc import Iterable

from kpi_tracker.api.models import KpiDefinition, KpiEvent, KpiKind


AggregatedValue = int | bool


def zero_value(kind: KpiKind) -> AggregatedValue:
    return 0 if kind == KpiKind.COUNTER else False


def definitions_by_id(definitions: Iterable[KpiDefinition]) -> dict[str, KpiDefinition]:
    # Duplicate ids: last one wins.
    return {d.kpi_id: d for d in definitions}


def order_events(events: Iterable[KpiEvent]) -> list[KpiEvent]:
    """Ascending by timestamp; ties keep the order they were retrieved in."""

    return sorted(events, key=lambda e: e.timestamp)


def aggregate(definitions: Iterable[KpiDefinition], events: Iterable[KpiEvent]) -> dict[str, AggregatedValue]:
    """Fold a game's event log into one value per defined KPI.

    Counters sum their deltas. Toggles take the value of the latest event.
    Events for unknown KPIs, or carrying the wrong kind of value for their
    KPI, are skipped rather than raising: the log may hold stale or garbage
    entries and the summary should still render.
    """

    defs = definitions_by_id(definitions)
    values: dict[str, AggregatedValue] = {kpi_id: zero_value(d.kind) for kpi_id, d in defs.items()}

    for event in order_events(events):
        d = defs.get(event.kpi_id)
        if d is None:
            continue

        if d.kind == KpiKind.COUNTER:
            if event.delta is not None:
                values[event.kpi_id] = int(values[event.kpi_id]) + event.delta
        elif d.kind == KpiKind.TOGGLE:
            if event.toggle_value is not None:
                values[event.kpi_id] = event.toggle_value

    return values
