"""
Date bucketing - gap-filled daily and weekly series.

Key behaviors:
- Day buckets are keyed by UTC calendar date
- Week buckets are keyed by the Sunday on or before the UTC date
- Keys are generated for the whole window first, then records are folded in,
  so empty buckets are always present with a zero value
- A window that starts after ``now`` yields a single zero bucket
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime, timedelta

from .models import Aggregate, Granularity, MetricRecord, TimeBucket

logger = logging.getLogger(__name__)

_STEP_DAYS = {
    Granularity.DAY: 1,
    Granularity.WEEK: 7,
}


# --- Key Calculation ---


def to_utc(ts: datetime) -> datetime:
    """Normalize a timestamp to aware UTC. Naive values are taken as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC)


def week_start(day: date) -> date:
    """Most recent Sunday at or before ``day``."""
    # date.weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def bucket_key(ts: datetime, granularity: Granularity) -> date:
    """Calendar-aligned bucket start for a timestamp."""
    day = to_utc(ts).date()
    if granularity == Granularity.DAY:
        return day
    elif granularity == Granularity.WEEK:
        return week_start(day)
    else:
        msg = f"Unknown granularity: {granularity}"
        raise ValueError(msg)


def window_start_for(now: datetime, granularity: Granularity, length: int) -> datetime:
    """
    Raw start of a trailing window of ``length`` days or weeks ending at ``now``.

    Weekly windows are aligned later, by ``generate_keys``.
    """
    return to_utc(now) - timedelta(days=length * _STEP_DAYS[granularity])


def generate_keys(window_start: datetime, now: datetime, granularity: Granularity) -> list[date]:
    """
    Every bucket key from the aligned window start through the bucket holding ``now``.

    Returns ``[bucket_key(now)]`` when the window starts after ``now``.
    """
    last = bucket_key(now, granularity)
    if to_utc(window_start) > to_utc(now):
        logger.warning(
            "Window start %s is after now %s; returning a single empty bucket",
            window_start.isoformat(),
            now.isoformat(),
        )
        return [last]

    step = timedelta(days=_STEP_DAYS[granularity])
    first = bucket_key(window_start, granularity)
    count = (last - first).days // step.days + 1
    return [first + step * i for i in range(count)]


# --- Bucketing ---


def fold(
    records: Iterable[MetricRecord],
    keys: Sequence[date],
    granularity: Granularity,
    aggregate: Aggregate = Aggregate.COUNT,
) -> list[TimeBucket]:
    """Fold records into pre-generated keys. Records outside the keys are dropped."""
    totals: dict[date, int | float] = dict.fromkeys(keys, 0)

    for record in records:
        key = bucket_key(record.timestamp, granularity)
        if key not in totals:
            continue
        if aggregate == Aggregate.SUM:
            totals[key] += record.value or 0
        else:
            totals[key] += 1

    return [TimeBucket(start=key, value=totals[key]) for key in keys]


def bucketize(
    records: Iterable[MetricRecord],
    window_start: datetime,
    now: datetime,
    granularity: Granularity,
    aggregate: Aggregate = Aggregate.COUNT,
) -> list[TimeBucket]:
    """
    Build an ordered, gap-filled series over ``[window_start, now]``.

    Args:
        records: Records to fold; only their timestamp (and value for SUM) is read.
        window_start: Raw window start. Weekly windows are re-aligned to Sunday.
        now: The report's single clock reading.
        granularity: Day or week buckets.
        aggregate: COUNT increments per record, SUM adds ``record.value``.

    Returns:
        One TimeBucket per key, strictly increasing and contiguous.
    """
    granularity = Granularity(granularity)
    aggregate = Aggregate(aggregate)

    keys = generate_keys(window_start, now, granularity)
    if to_utc(window_start) > to_utc(now):
        return [TimeBucket(start=keys[0], value=0)]

    return fold(records, keys, granularity, aggregate)
