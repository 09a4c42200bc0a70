"""
Analytics component - Dashboard reporting engine.
"""

from ._breakdown import breakdown, summarize
from ._bucket import (
    bucket_key,
    bucketize,
    generate_keys,
    week_start,
    window_start_for,
)
from ._rank import top_n
from .component import (
    AnalyticsService,
    ReportConfig,
    build_config,
    create_analytics_service,
    run_report,
    run_top_search_terms,
)
from .models import (
    DEFAULT_CATEGORIES,
    Aggregate,
    AnalyticsError,
    AnalyticsReport,
    CategoryCount,
    EventFilter,
    FindOptions,
    Granularity,
    LeadStatus,
    MetricRecord,
    RankedEntity,
    RecordSource,
    ReportSummary,
    StoreUnavailableError,
    TimeBucket,
)
from .ports import ClockPort, EventStorePort, RulesPort

__all__ = [
    # Entry points
    "run_report",
    "run_top_search_terms",
    # Service
    "AnalyticsService",
    "ReportConfig",
    "build_config",
    "create_analytics_service",
    # Pure functions
    "breakdown",
    "bucket_key",
    "bucketize",
    "generate_keys",
    "summarize",
    "top_n",
    "week_start",
    "window_start_for",
    # Models
    "DEFAULT_CATEGORIES",
    "Aggregate",
    "AnalyticsReport",
    "CategoryCount",
    "EventFilter",
    "FindOptions",
    "Granularity",
    "LeadStatus",
    "MetricRecord",
    "RankedEntity",
    "RecordSource",
    "ReportSummary",
    "TimeBucket",
    # Errors
    "AnalyticsError",
    "StoreUnavailableError",
    # Ports
    "ClockPort",
    "EventStorePort",
    "RulesPort",
]
