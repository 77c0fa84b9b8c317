from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from kpi_tracker.api.models import RecordKpiEventRequest


ALLOWED_DELTAS = frozenset({1, -1})


class ValidationError(ValueError):
    """An incoming KPI event was rejected before being persisted."""


class EventRule(ABC):
    """A small, composable check for an incoming KPI event."""

    @abstractmethod
    def check(self, payload: RecordKpiEventRequest) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class KpiIdRequired(EventRule):
    def check(self, payload: RecordKpiEventRequest) -> None:
        if not payload.kpi_id:
            raise ValidationError("kpiId is required")


@dataclass(frozen=True, slots=True)
class DeltaRange(EventRule):
    """Counter deltas are unit steps only."""

    allowed: frozenset[int] = ALLOWED_DELTAS

    def check(self, payload: RecordKpiEventRequest) -> None:
        if payload.delta is not None and payload.delta not in self.allowed:
            raise ValidationError("delta must be 1 or -1 for counter events")


@dataclass(frozen=True, slots=True)
class SingleValue(EventRule):
    """An event carries a counter delta or a toggle value, never both."""

    def check(self, payload: RecordKpiEventRequest) -> None:
        has_delta = payload.delta is not None
        has_toggle = payload.toggle_value is not None
        if has_delta and has_toggle:
            raise ValidationError("provide either delta or toggleValue, not both")
        if not has_delta and not has_toggle:
            raise ValidationError("provide either delta or toggleValue")


@dataclass(frozen=True, slots=True)
class EventRulePipeline:
    rules: tuple[EventRule, ...]

    def check(self, payload: RecordKpiEventRequest) -> None:
        for rule in self.rules:
            rule.check(payload)


# Order matters: the first failing rule decides the error message.
DEFAULT_EVENT_PIPELINE = EventRulePipeline(
    rules=(
        KpiIdRequired(),
        DeltaRange(),
        SingleValue(),
    )
)


def validate_event(payload: RecordKpiEventRequest, *, pipeline: EventRulePipeline = DEFAULT_EVENT_PIPELINE) -> None:
    """Raise ValidationError if the event must not be persisted.

    Whether the KPI exists for the game, or whether its kind matches the value
    supplied, is not checked here. Aggregation ignores such events instead.
    """

    pipeline.check(payload)
