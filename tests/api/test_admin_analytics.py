"""
Tests for Admin Analytics API.

- Report endpoint returns the dashboard JSON shape
- Store failures surface as a single 503, never a partial report
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.clock import FrozenClock
from src.adapters.memory_store import InMemoryEventStore
from src.api.routes import admin_analytics
from src.components.analytics import (
    AnalyticsService,
    EventFilter,
    MetricRecord,
    RecordSource,
)

NOW = datetime(2024, 6, 15, 14, 30, tzinfo=UTC)

# --- Test Setup ---


class UnavailableStore(InMemoryEventStore):
    """Store whose aggregate query fails."""

    def sum_field(self, field_name: str, filter: EventFilter | None = None) -> float:
        raise ConnectionError("connection refused")


@pytest.fixture
def store() -> InMemoryEventStore:
    """Store with a few listings, inquiries and search terms."""
    store = InMemoryEventStore()
    store.add_many(
        RecordSource.ENTITY,
        [
            MetricRecord("v1", NOW - timedelta(days=2), value=42, label="Villa Lotus"),
            MetricRecord("v2", NOW - timedelta(days=9), value=17, label="Villa Orchid"),
        ],
    )
    store.add_many(
        RecordSource.INQUIRY,
        [
            MetricRecord("l1", NOW - timedelta(days=1), category="PENDING"),
            MetricRecord("l2", NOW - timedelta(days=1), category="CONTACTED"),
            MetricRecord("l3", NOW - timedelta(days=4), category="ARCHIVED"),
        ],
    )
    store.add_many(
        RecordSource.SEARCH,
        [
            MetricRecord("pool villa", NOW, value=8),
            MetricRecord("canggu", NOW, value=15),
        ],
    )
    return store


def make_app(store: InMemoryEventStore) -> FastAPI:
    """Test FastAPI app with analytics routes."""
    app = FastAPI()
    app.include_router(admin_analytics.router, prefix="/analytics")

    # Override dependency
    app.dependency_overrides[admin_analytics.get_analytics_service] = lambda: AnalyticsService(
        store=store, clock=FrozenClock(NOW)
    )
    return app


@pytest.fixture
def client(store: InMemoryEventStore) -> TestClient:
    """Test client."""
    return TestClient(make_app(store))


# --- Report Endpoint ---


class TestReportEndpoint:
    """GET /report."""

    def test_report_shape(self, client: TestClient) -> None:
        response = client.get("/analytics/report")

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {
            "topEntities",
            "dailySeries",
            "weeklySeries",
            "categoryBreakdown",
            "summary",
        }

    def test_top_entities(self, client: TestClient) -> None:
        data = client.get("/analytics/report").json()

        assert data["topEntities"] == [
            {"id": "v1", "label": "Villa Lotus", "metricValue": 42},
            {"id": "v2", "label": "Villa Orchid", "metricValue": 17},
        ]

    def test_daily_series(self, client: TestClient) -> None:
        data = client.get("/analytics/report").json()

        assert len(data["dailySeries"]) == 31
        assert data["dailySeries"][0] == {"date": "2024-05-16", "count": 0}
        assert {"date": "2024-06-14", "count": 2} in data["dailySeries"]
        assert {"date": "2024-06-11", "count": 1} in data["dailySeries"]

    def test_weekly_series(self, client: TestClient) -> None:
        data = client.get("/analytics/report").json()

        assert data["weeklySeries"][0]["week"] == "2024-03-17"
        assert data["weeklySeries"][-1] == {"week": "2024-06-09", "value": 42}
        assert {"week": "2024-06-02", "value": 17} in data["weeklySeries"]

    def test_breakdown_and_summary(self, client: TestClient) -> None:
        data = client.get("/analytics/report").json()

        assert data["categoryBreakdown"] == {"PENDING": 1, "CONTACTED": 1, "CLOSED": 0}
        assert data["summary"] == {"entityCount": 2, "recordCount": 3, "totalValue": 59}

    def test_repeat_requests_identical(self, client: TestClient) -> None:
        first = client.get("/analytics/report").content
        second = client.get("/analytics/report").content
        assert first == second

    def test_store_failure_returns_503(self) -> None:
        client = TestClient(make_app(UnavailableStore()))

        response = client.get("/analytics/report")

        assert response.status_code == 503
        assert "topEntities" not in response.json()


# --- Search Terms Endpoint ---


class TestSearchTermsEndpoint:
    """GET /search-terms/top."""

    def test_top_terms(self, client: TestClient) -> None:
        response = client.get("/analytics/search-terms/top")

        assert response.status_code == 200
        assert [i["id"] for i in response.json()["items"]] == ["canggu", "pool villa"]

    def test_limit(self, client: TestClient) -> None:
        items = client.get("/analytics/search-terms/top?limit=1").json()["items"]
        assert items == [{"id": "canggu", "label": "canggu", "metricValue": 15}]

    def test_invalid_limit(self, client: TestClient) -> None:
        response = client.get("/analytics/search-terms/top?limit=0")
        assert response.status_code == 422
