"""
Admin Analytics API.

Serves the dashboard report and the search term ranking. Callers must be
authorized by the application that mounts this router.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from src.api.deps import get_analytics_service
from src.components.analytics import AnalyticsReport, AnalyticsService, StoreUnavailableError

router = APIRouter()
logger = logging.getLogger(__name__)


# --- Response Models ---


class RankedEntityItem(BaseModel):
    """Ranked entity."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    label: str
    metric_value: int | float = Field(alias="metricValue")


class DailyPoint(BaseModel):
    """Daily series point."""

    date: str
    count: int


class WeeklyPoint(BaseModel):
    """Weekly series point (week starts on Sunday)."""

    week: str
    value: int | float


class SummaryResponse(BaseModel):
    """Summary totals."""

    model_config = ConfigDict(populate_by_name=True)

    entity_count: int = Field(alias="entityCount")
    record_count: int = Field(alias="recordCount")
    total_value: int | float = Field(alias="totalValue")


class ReportResponse(BaseModel):
    """Dashboard report response."""

    model_config = ConfigDict(populate_by_name=True)

    top_entities: list[RankedEntityItem] = Field(alias="topEntities")
    daily_series: list[DailyPoint] = Field(alias="dailySeries")
    weekly_series: list[WeeklyPoint] = Field(alias="weeklySeries")
    category_breakdown: dict[str, int] = Field(alias="categoryBreakdown")
    summary: SummaryResponse


class SearchTermsResponse(BaseModel):
    """Top search terms response."""

    items: list[RankedEntityItem]


# --- Helper Functions ---


def to_response(report: AnalyticsReport) -> ReportResponse:
    """Map the component report onto the response model."""
    return ReportResponse.model_validate(report.to_dict())


# --- Routes ---


@router.get(
    "/report",
    response_model=ReportResponse,
    response_model_by_alias=True,
)
def get_report(
    service: AnalyticsService = Depends(get_analytics_service),
) -> ReportResponse:
    """
    Get the complete dashboard report.

    Returns top listings, daily inquiries, weekly views, status breakdown
    and summary totals. Fails with 503 if any store query fails.
    """
    try:
        report = service.generate_report()
    except StoreUnavailableError as e:
        logger.error("Analytics report failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analytics data is temporarily unavailable",
        ) from e

    return to_response(report)


@router.get(
    "/search-terms/top",
    response_model=SearchTermsResponse,
    response_model_by_alias=True,
)
def get_top_search_terms(
    limit: int | None = Query(None, ge=1, le=100, description="Number of results"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> SearchTermsResponse:
    """Get the most searched keywords."""
    try:
        terms = service.top_search_terms(limit)
    except StoreUnavailableError as e:
        logger.error("Search term ranking failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analytics data is temporarily unavailable",
        ) from e

    return SearchTermsResponse(
        items=[
            RankedEntityItem(id=t.id, label=t.label, metric_value=t.metric_value)
            for t in terms
        ],
    )
