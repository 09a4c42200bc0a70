"""
Categorical breakdown and summary totals.

Key behaviors:
- Breakdown has exactly one entry per known category, in the caller's order
- Category matching is exact and case-sensitive
- Records with an unrecognized category are left out of the breakdown
- Summary totals treat missing values as 0
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .models import CategoryCount, MetricRecord, ReportSummary

logger = logging.getLogger(__name__)


def breakdown(
    records: Iterable[MetricRecord],
    known_categories: Sequence[str],
) -> list[CategoryCount]:
    """
    Count records into a closed set of categories.

    Args:
        records: Records carrying an optional ``category``.
        known_categories: The recognized categories. Repeats collapse to the
            first occurrence.

    Returns:
        One CategoryCount per known category, zero-filled.
    """
    counts: dict[str, int] = dict.fromkeys(known_categories, 0)
    unrecognized = 0

    for record in records:
        if record.category in counts:
            counts[record.category] += 1
        else:
            unrecognized += 1

    if unrecognized:
        logger.debug("Excluded %d records with unrecognized category", unrecognized)

    return [CategoryCount(category=c, count=n) for c, n in counts.items()]


def summarize(
    entity_count: int,
    record_count: int,
    values: Iterable[float | None],
) -> ReportSummary:
    """Compose scalar totals; ``None`` values add nothing."""
    return ReportSummary(
        entity_count=entity_count,
        record_count=record_count,
        total_value=sum(v or 0 for v in values),
    )
