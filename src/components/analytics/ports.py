"""
Analytics component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .models import EventFilter, FindOptions, MetricRecord


class EventStorePort(Protocol):
    """Read-only event store interface. Implemented by the persistence layer."""

    def count(self, filter: EventFilter | None = None) -> int:
        """Count records matching the filter."""
        ...

    def find_many(
        self,
        filter: EventFilter,
        options: FindOptions | None = None,
    ) -> list[MetricRecord]:
        """Return records matching the filter, ordered/limited by options."""
        ...

    def sum_field(self, field_name: str, filter: EventFilter | None = None) -> float:
        """Sum a numeric field over matching records. Missing values count as 0."""
        ...


class ClockPort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...


class RulesPort(Protocol):
    """Port for analytics report configuration."""

    def get_daily_window_days(self) -> int:
        """Trailing window for the daily series, in days."""
        ...

    def get_weekly_window_weeks(self) -> int:
        """Trailing window for the weekly series, in weeks."""
        ...

    def get_top_n(self) -> int:
        """How many entities the ranking returns."""
        ...

    def get_search_top_n(self) -> int:
        """How many search terms the search ranking returns."""
        ...

    def get_known_categories(self) -> tuple[str, ...]:
        """Closed set of categories the breakdown recognizes."""
        ...

    def use_concurrent_queries(self) -> bool:
        """Whether store queries may run in parallel."""
        ...

    def get_max_workers(self) -> int:
        """Thread pool size for concurrent queries."""
        ...
