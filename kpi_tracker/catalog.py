from __future__ import annotations

from kpi_tracker.api.models import KpiDefinition, KpiKind


# Seeded into every new game, in display order.
DEFAULT_KPIS: tuple[tuple[str, str, KpiKind], ...] = (
    ("shots_on_target", "Shots on Target", KpiKind.COUNTER),
    ("shots_off_target", "Shots off Target", KpiKind.COUNTER),
    ("goals", "Goals", KpiKind.COUNTER),
    ("tackles_won", "Tackles Won", KpiKind.COUNTER),
    ("passes_completed", "Passes Completed", KpiKind.COUNTER),
    ("key_passes", "Key Passes", KpiKind.COUNTER),
    ("interceptions", "Interceptions", KpiKind.COUNTER),
    ("fouls_committed", "Fouls Committed", KpiKind.COUNTER),
    ("yellow_card", "Yellow Card", KpiKind.TOGGLE),
    ("red_card", "Red Card", KpiKind.TOGGLE),
    ("clean_sheet", "Clean Sheet (So Far)", KpiKind.TOGGLE),
    ("momentum", "Momentum (Winning)", KpiKind.TOGGLE),
)


def default_kpis_for_game(game_id: str) -> list[KpiDefinition]:
    return [KpiDefinition(game_id=game_id, kpi_id=kpi_id, label=label, kind=kind) for kpi_id, label, kind in DEFAULT_KPIS]
