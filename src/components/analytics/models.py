"""
Analytics component input/output models.

Records are read from the event store and never mutated here. Every report
object is built fresh per request.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

# --- Errors ---


class AnalyticsError(Exception):
    """Base error for the analytics component."""


class StoreUnavailableError(AnalyticsError):
    """An event store query failed; the whole report is abandoned."""

    def __init__(self, query: str, message: str) -> None:
        self.query = query
        super().__init__(f"Event store query '{query}' failed: {message}")


# --- Enums ---


class Granularity(str, Enum):
    """Time bucket width."""

    DAY = "day"
    WEEK = "week"


class Aggregate(str, Enum):
    """How records are folded into a bucket."""

    COUNT = "count"
    SUM = "sum"


class RecordSource(str, Enum):
    """Which collection of the event store a query targets."""

    ENTITY = "entity"
    INQUIRY = "inquiry"
    SEARCH = "search"


class LeadStatus(str, Enum):
    """Known inquiry statuses."""

    PENDING = "PENDING"
    CONTACTED = "CONTACTED"
    CLOSED = "CLOSED"


DEFAULT_CATEGORIES: tuple[str, ...] = tuple(s.value for s in LeadStatus)


# --- Store Query Models ---


@dataclass(frozen=True)
class MetricRecord:
    """One observed event (a listing with its views, an inquiry, a search term)."""

    entity_id: str
    timestamp: datetime
    category: str | None = None
    value: float | None = None
    label: str | None = None


@dataclass(frozen=True)
class EventFilter:
    """Filter for event store reads. ``since``/``until`` are inclusive."""

    source: RecordSource
    since: datetime | None = None
    until: datetime | None = None


@dataclass(frozen=True)
class FindOptions:
    """Ordering and paging for ``find_many``."""

    order_by: str | None = None
    descending: bool = False
    limit: int | None = None
    select: tuple[str, ...] | None = None


# --- Output Models ---


@dataclass(frozen=True)
class TimeBucket:
    """One gap-filled bucket of a series. ``value`` is a count or a sum."""

    start: date
    value: int | float = 0


@dataclass(frozen=True)
class RankedEntity:
    """Entity ranked by a numeric metric."""

    id: str
    label: str
    metric_value: float


@dataclass(frozen=True)
class CategoryCount:
    """Count of records for one known category."""

    category: str
    count: int = 0


@dataclass(frozen=True)
class ReportSummary:
    """Scalar totals."""

    entity_count: int
    record_count: int
    total_value: float


@dataclass(frozen=True)
class AnalyticsReport:
    """Dashboard report assembled from one clock reading."""

    generated_at: datetime
    top_entities: tuple[RankedEntity, ...]
    daily_series: tuple[TimeBucket, ...]
    weekly_series: tuple[TimeBucket, ...]
    category_breakdown: tuple[CategoryCount, ...]
    summary: ReportSummary

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the dashboard JSON shape."""
        return {
            "topEntities": [
                {"id": e.id, "label": e.label, "metricValue": e.metric_value}
                for e in self.top_entities
            ],
            "dailySeries": [
                {"date": b.start.isoformat(), "count": b.value} for b in self.daily_series
            ],
            "weeklySeries": [
                {"week": b.start.isoformat(), "value": b.value} for b in self.weekly_series
            ],
            "categoryBreakdown": {c.category: c.count for c in self.category_breakdown},
            "summary": {
                "entityCount": self.summary.entity_count,
                "recordCount": self.summary.record_count,
                "totalValue": self.summary.total_value,
            },
        }
