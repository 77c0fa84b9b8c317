from __future__ import annotations

from collections.abc import Mapping, Sequence

from kpi_tracker.api.models import GameSummary, KpiDefinition, KpiKind, KpiSummary
from kpi_tracker.core.aggregation import AggregatedValue


def summarize_kpi(definition: KpiDefinition, aggregated: Mapping[str, AggregatedValue]) -> KpiSummary:
    raw = aggregated.get(definition.kpi_id)
    if definition.kind == KpiKind.COUNTER:
        total = int(raw) if raw is not None else 0
        return KpiSummary(kpi_id=definition.kpi_id, label=definition.label, total=total)
    value = bool(raw) if raw is not None else False
    return KpiSummary(kpi_id=definition.kpi_id, label=definition.label, value=value)


def build_summary(
    game_id: str,
    definitions: Sequence[KpiDefinition],
    aggregated: Mapping[str, AggregatedValue],
) -> GameSummary:
    """One entry per definition, in definition order, defaulting to 0 / False."""

    return GameSummary(game_id=game_id, kpis=[summarize_kpi(d, aggregated) for d in definitions])
