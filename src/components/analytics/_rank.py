"""
Top-N ranking.

Entities are ordered by metric value, highest first. Entities with equal
values keep the order they were supplied in, so identical inputs always give
identical rankings.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import MetricRecord, RankedEntity


def to_ranked(item: MetricRecord | RankedEntity) -> RankedEntity:
    """Convert a store record to a ranked entity. Missing values rank as 0."""
    if isinstance(item, RankedEntity):
        return item
    return RankedEntity(
        id=item.entity_id,
        label=item.label or item.entity_id,
        metric_value=item.value or 0,
    )


def top_n(items: Iterable[MetricRecord | RankedEntity], n: int) -> list[RankedEntity]:
    """Return at most ``n`` entities by descending metric value (stable)."""
    if n <= 0:
        return []

    entities = [to_ranked(item) for item in items]
    # sorted() is stable, including with reverse=True
    ranked = sorted(entities, key=lambda e: e.metric_value, reverse=True)
    return ranked[:n]
