"""
Analytics component - Dashboard report generation.

Turns raw listing/inquiry records into one report: top listings, gap-filled
daily and weekly series, an inquiry status breakdown and summary totals.

Invariants:
- I1: One clock reading per report; every window is derived from it
- I2: Daily and weekly series always have the full number of buckets
- I3: Breakdown lists every known category exactly once
- I4: Any store failure aborts the report; no partial reports
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ._breakdown import breakdown, summarize
from ._bucket import bucketize, window_start_for
from ._rank import top_n
from .models import (
    DEFAULT_CATEGORIES,
    Aggregate,
    AnalyticsReport,
    EventFilter,
    FindOptions,
    Granularity,
    RankedEntity,
    RecordSource,
    StoreUnavailableError,
)
from .ports import ClockPort, EventStorePort, RulesPort

logger = logging.getLogger(__name__)


# --- Configuration ---


@dataclass(frozen=True)
class ReportConfig:
    """Report windows, ranking sizes and query execution settings."""

    daily_window_days: int = 30
    weekly_window_weeks: int = 12
    top_n: int = 5
    search_top_n: int = 10
    known_categories: tuple[str, ...] = DEFAULT_CATEGORIES
    concurrent_queries: bool = True
    max_workers: int = 4


DEFAULT_CONFIG = ReportConfig()


def build_config(rules: RulesPort | None) -> ReportConfig:
    """Build report config from rules port."""
    if rules is None:
        return DEFAULT_CONFIG

    return ReportConfig(
        daily_window_days=rules.get_daily_window_days(),
        weekly_window_weeks=rules.get_weekly_window_weeks(),
        top_n=rules.get_top_n(),
        search_top_n=rules.get_search_top_n(),
        known_categories=rules.get_known_categories(),
        concurrent_queries=rules.use_concurrent_queries(),
        max_workers=rules.get_max_workers(),
    )


# --- Service ---


class AnalyticsService:
    """
    Dashboard report service.

    Reads from the event store only; holds no state between reports.
    """

    def __init__(
        self,
        store: EventStorePort,
        clock: ClockPort | None = None,
        config: ReportConfig | None = None,
    ) -> None:
        """Initialize service."""
        if clock is None:
            from src.adapters.clock import SystemClock

            clock = SystemClock()
        self._store = store
        self._clock = clock
        self._config = config or DEFAULT_CONFIG

    @property
    def config(self) -> ReportConfig:
        return self._config

    def generate_report(self) -> AnalyticsReport:
        """
        Generate the full dashboard report.

        Raises:
            StoreUnavailableError: If any store query fails.
        """
        now = self._clock.now_utc()
        cfg = self._config

        daily_start = window_start_for(now, Granularity.DAY, cfg.daily_window_days)
        weekly_start = window_start_for(now, Granularity.WEEK, cfg.weekly_window_weeks)

        store = self._store
        queries: dict[str, Callable[[], Any]] = {
            "top_entities": lambda: store.find_many(
                EventFilter(source=RecordSource.ENTITY),
                FindOptions(
                    order_by="value",
                    descending=True,
                    limit=cfg.top_n,
                    select=("entity_id", "label", "value"),
                ),
            ),
            "daily_records": lambda: store.find_many(
                EventFilter(source=RecordSource.INQUIRY, since=daily_start, until=now),
                FindOptions(order_by="timestamp", select=("timestamp",)),
            ),
            "weekly_records": lambda: store.find_many(
                EventFilter(source=RecordSource.ENTITY, since=weekly_start, until=now),
                FindOptions(order_by="timestamp", select=("timestamp", "value")),
            ),
            "category_records": lambda: store.find_many(
                EventFilter(source=RecordSource.INQUIRY),
                FindOptions(select=("category",)),
            ),
            "entity_count": lambda: store.count(EventFilter(source=RecordSource.ENTITY)),
            "record_count": lambda: store.count(EventFilter(source=RecordSource.INQUIRY)),
            "total_value": lambda: store.sum_field(
                "value", EventFilter(source=RecordSource.ENTITY)
            ),
        }

        results = self._run_queries(queries)

        report = AnalyticsReport(
            generated_at=now,
            top_entities=tuple(top_n(results["top_entities"], cfg.top_n)),
            daily_series=tuple(
                bucketize(
                    results["daily_records"],
                    daily_start,
                    now,
                    Granularity.DAY,
                    Aggregate.COUNT,
                )
            ),
            weekly_series=tuple(
                bucketize(
                    results["weekly_records"],
                    weekly_start,
                    now,
                    Granularity.WEEK,
                    Aggregate.SUM,
                )
            ),
            category_breakdown=tuple(
                breakdown(results["category_records"], cfg.known_categories)
            ),
            summary=summarize(
                entity_count=results["entity_count"],
                record_count=results["record_count"],
                values=[results["total_value"]],
            ),
        )

        logger.info(
            "Generated analytics report at %s (%d daily, %d weekly buckets)",
            now.isoformat(),
            len(report.daily_series),
            len(report.weekly_series),
        )
        return report

    def top_search_terms(self, limit: int | None = None) -> list[RankedEntity]:
        """
        Most frequent search keywords.

        Raises:
            StoreUnavailableError: If the store query fails.
        """
        n = self._config.search_top_n if limit is None else limit
        results = self._run_queries(
            {
                "search_terms": lambda: self._store.find_many(
                    EventFilter(source=RecordSource.SEARCH),
                    FindOptions(order_by="value", descending=True, limit=n),
                ),
            }
        )
        return top_n(results["search_terms"], n)

    def _run_queries(self, queries: dict[str, Callable[[], Any]]) -> dict[str, Any]:
        """Run independent store reads, failing fast on the first error."""
        # Stores backed by a single shared connection opt out of worker threads
        concurrent = self._config.concurrent_queries and getattr(
            self._store, "concurrent_reads", True
        )
        if concurrent and len(queries) > 1:
            return self._run_concurrent(queries)

        results: dict[str, Any] = {}
        for name, query in queries.items():
            results[name] = _call(name, query)
        return results

    def _run_concurrent(self, queries: dict[str, Callable[[], Any]]) -> dict[str, Any]:
        executor = ThreadPoolExecutor(
            max_workers=max(1, self._config.max_workers),
            thread_name_prefix="analytics-query",
        )
        futures: dict[Future[Any], str] = {}
        try:
            for name, query in queries.items():
                futures[executor.submit(_call, name, query)] = name

            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
            for future in done:
                exc = future.exception()
                if exc is not None:
                    raise exc

            return {name: future.result() for future, name in futures.items()}
        finally:
            # Abandon anything still queued or running after a failure
            executor.shutdown(wait=False, cancel_futures=True)


def _call(name: str, query: Callable[[], Any]) -> Any:
    try:
        return query()
    except StoreUnavailableError:
        raise
    except Exception as e:
        logger.warning("Analytics query %s failed: %s", name, e)
        raise StoreUnavailableError(name, str(e)) from e


# --- Factory ---


def create_analytics_service(
    store: EventStorePort,
    clock: ClockPort | None = None,
    rules: RulesPort | None = None,
) -> AnalyticsService:
    """Create an AnalyticsService."""
    return AnalyticsService(store=store, clock=clock, config=build_config(rules))


# --- Component Entry Points ---


def run_report(
    *,
    store: EventStorePort,
    clock: ClockPort | None = None,
    rules: RulesPort | None = None,
) -> AnalyticsReport:
    """
    Generate one dashboard report.

    Args:
        store: Event store port.
        clock: Optional clock port (system clock if omitted).
        rules: Optional rules port for configuration.

    Returns:
        AnalyticsReport built from a single clock reading.
    """
    return create_analytics_service(store, clock=clock, rules=rules).generate_report()


def run_top_search_terms(
    *,
    store: EventStorePort,
    limit: int | None = None,
    rules: RulesPort | None = None,
) -> list[RankedEntity]:
    """Rank search keywords by hit count."""
    return create_analytics_service(store, rules=rules).top_search_terms(limit)
