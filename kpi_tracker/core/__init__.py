"""KPI core: event validation, aggregation and summary building.

Pure functions over already-fetched data. Kept free of FastAPI and Redis
concerns so routes, the store and tests can all call them directly.
"""

from kpi_tracker.core.aggregation import aggregate
from kpi_tracker.core.summary import build_summary
from kpi_tracker.core.validation import ValidationError, validate_event

__all__ = ["ValidationError", "aggregate", "build_summary", "validate_event"]
