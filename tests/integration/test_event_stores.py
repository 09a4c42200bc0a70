"""
Event store adapter contract tests.

Runs the same checks against the in-memory and SQLite stores, then builds a
report end to end from each.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, date, datetime, timedelta
from pathlib import Path

import pytest

from src.adapters.clock import FrozenClock
from src.adapters.memory_store import InMemoryEventStore
from src.adapters.sqlite_store import SQLiteEventStore
from src.components.analytics import (
    AnalyticsService,
    EventFilter,
    FindOptions,
    MetricRecord,
    RecordSource,
    create_analytics_service,
)
from src.rules.analytics_rules import AnalyticsRulesAdapter

NOW = datetime(2024, 6, 15, 14, 30, tzinfo=UTC)

LISTINGS = [
    MetricRecord("v1", NOW - timedelta(days=3), value=120, label="Villa Lotus"),
    MetricRecord("v2", NOW - timedelta(days=20), value=300, label="Villa Orchid"),
    MetricRecord("v3", NOW - timedelta(days=40), value=120, label="Villa Palm"),
    MetricRecord("v4", NOW - timedelta(days=200), value=None, label="Villa Teak"),
]

INQUIRIES = [
    MetricRecord("l1", NOW - timedelta(days=1), category="PENDING"),
    MetricRecord("l2", NOW - timedelta(days=1, hours=3), category="CLOSED"),
    MetricRecord("l3", NOW - timedelta(days=35), category="CONTACTED"),
    MetricRecord("l4", NOW - timedelta(days=2), category="ARCHIVED"),
]


@pytest.fixture(params=["memory", "sqlite"])
def store(request: pytest.FixtureRequest, tmp_path: Path) -> Iterator[object]:
    """Store seeded with listings and inquiries."""
    if request.param == "memory":
        s: InMemoryEventStore | SQLiteEventStore = InMemoryEventStore()
    else:
        s = SQLiteEventStore(str(tmp_path / "analytics.db"))
        s.init_schema()

    s.add_many(RecordSource.ENTITY, LISTINGS)
    s.add_many(RecordSource.INQUIRY, INQUIRIES)
    yield s


class TestEventStoreContract:
    """Behavior shared by every EventStorePort implementation."""

    def test_count_by_source(self, store) -> None:  # type: ignore[no-untyped-def]
        assert store.count(EventFilter(RecordSource.ENTITY)) == 4
        assert store.count(EventFilter(RecordSource.INQUIRY)) == 4
        assert store.count(EventFilter(RecordSource.SEARCH)) == 0

    def test_count_all(self, store) -> None:  # type: ignore[no-untyped-def]
        assert store.count() == 8

    def test_time_filter_inclusive(self, store) -> None:  # type: ignore[no-untyped-def]
        flt = EventFilter(
            RecordSource.INQUIRY,
            since=NOW - timedelta(days=2),
            until=NOW - timedelta(days=1),
        )
        found = store.find_many(flt)
        assert sorted(r.entity_id for r in found) == ["l1", "l2", "l4"]

    def test_order_and_limit(self, store) -> None:  # type: ignore[no-untyped-def]
        found = store.find_many(
            EventFilter(RecordSource.ENTITY),
            FindOptions(order_by="value", descending=True, limit=3),
        )
        assert [r.entity_id for r in found] == ["v2", "v1", "v3"]

    def test_select_keeps_identity(self, store) -> None:  # type: ignore[no-untyped-def]
        found = store.find_many(
            EventFilter(RecordSource.INQUIRY), FindOptions(select=("category",))
        )
        assert len(found) == 4
        assert {r.category for r in found} == {"PENDING", "CLOSED", "CONTACTED", "ARCHIVED"}

    def test_timestamps_round_trip_as_utc(self, store) -> None:  # type: ignore[no-untyped-def]
        found = store.find_many(
            EventFilter(RecordSource.ENTITY), FindOptions(order_by="timestamp")
        )
        assert found[0].entity_id == "v4"
        assert found[-1].timestamp == NOW - timedelta(days=3)

    def test_sum_field_ignores_missing(self, store) -> None:  # type: ignore[no-untyped-def]
        assert store.sum_field("value", EventFilter(RecordSource.ENTITY)) == 540

    def test_whole_number_values_stay_int(self, store) -> None:  # type: ignore[no-untyped-def]
        found = store.find_many(
            EventFilter(RecordSource.ENTITY), FindOptions(order_by="value", descending=True)
        )
        assert [type(r.value) for r in found[:3]] == [int, int, int]
        total = store.sum_field("value", EventFilter(RecordSource.ENTITY))
        assert type(total) is int

    def test_sum_non_numeric_field_rejected(self, store) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(ValueError):
            store.sum_field("label", EventFilter(RecordSource.ENTITY))

    def test_unknown_order_field_rejected(self, store) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(ValueError):
            store.find_many(EventFilter(RecordSource.ENTITY), FindOptions(order_by="id; DROP"))


class TestReportFromStore:
    """Report generation against a real store."""

    def test_report(self, store) -> None:  # type: ignore[no-untyped-def]
        report = AnalyticsService(store=store, clock=FrozenClock(NOW)).generate_report()
        data = report.to_dict()

        assert [e["id"] for e in data["topEntities"]] == ["v2", "v1", "v3", "v4"]
        assert len(data["dailySeries"]) == 31
        daily = {p["date"]: p["count"] for p in data["dailySeries"]}
        assert daily["2024-06-14"] == 2
        assert daily["2024-06-13"] == 1
        assert sum(daily.values()) == 3

        weekly = {p["week"]: p["value"] for p in data["weeklySeries"]}
        assert all(date.fromisoformat(w).weekday() == 6 for w in weekly)
        assert weekly["2024-06-09"] == 120
        assert weekly["2024-05-26"] == 300
        assert weekly["2024-05-05"] == 120

        assert data["categoryBreakdown"] == {"PENDING": 1, "CONTACTED": 1, "CLOSED": 1}
        assert data["summary"] == {"entityCount": 4, "recordCount": 4, "totalValue": 540}
        assert type(data["summary"]["totalValue"]) is int
        assert type(data["topEntities"][0]["metricValue"]) is int

    def test_report_with_project_rules(self, store, frozen_clock, rules) -> None:  # type: ignore[no-untyped-def]
        service = create_analytics_service(
            store, clock=frozen_clock, rules=AnalyticsRulesAdapter(rules)
        )
        report = service.generate_report()

        assert report.generated_at == NOW
        assert len(report.daily_series) == rules.analytics.windows.daily_days + 1
        assert [c.category for c in report.category_breakdown] == (
            rules.analytics.breakdown.known_categories
        )


# --- Injected Connection ---


@pytest.fixture
def connection() -> Iterator[sqlite3.Connection]:
    """Plain in-memory connection, bound to the creating thread."""
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


class TestInjectedConnection:
    """SQLite store sharing a caller-provided connection."""

    def test_report_with_concurrent_queries(self, connection: sqlite3.Connection) -> None:
        store = SQLiteEventStore(":memory:", connection=connection)
        store.init_schema()
        store.add_many(RecordSource.ENTITY, LISTINGS)
        store.add_many(RecordSource.INQUIRY, INQUIRIES)

        service = AnalyticsService(store=store, clock=FrozenClock(NOW))
        assert service.config.concurrent_queries is True
        assert store.concurrent_reads is False

        data = service.generate_report().to_dict()

        assert [e["id"] for e in data["topEntities"]] == ["v2", "v1", "v3", "v4"]
        assert data["topEntities"][0]["metricValue"] == 300
        assert data["summary"] == {"entityCount": 4, "recordCount": 4, "totalValue": 540}
        assert data["categoryBreakdown"] == {"PENDING": 1, "CONTACTED": 1, "CLOSED": 1}

    def test_own_connections_allow_concurrent_reads(self, tmp_path: Path) -> None:
        store = SQLiteEventStore(str(tmp_path / "analytics.db"))
        assert store.concurrent_reads is True

    def test_shared_connection_serialized_across_threads(self) -> None:
        conn = sqlite3.connect(":memory:", check_same_thread=False)
        try:
            store = SQLiteEventStore(":memory:", connection=conn)
            store.init_schema()
            store.add_many(RecordSource.ENTITY, LISTINGS)

            flt = EventFilter(RecordSource.ENTITY)
            with ThreadPoolExecutor(max_workers=8) as pool:
                counts = list(pool.map(lambda _: store.count(flt), range(32)))
                totals = list(pool.map(lambda _: store.sum_field("value", flt), range(32)))

            assert counts == [4] * 32
            assert totals == [540] * 32
        finally:
            conn.close()
