"""
In-memory event store for tests and local development.

Implements EventStorePort over plain lists, one per record source.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from src.components.analytics.models import (
    EventFilter,
    FindOptions,
    MetricRecord,
    RecordSource,
)

_ORDERABLE_FIELDS = frozenset({"entity_id", "timestamp", "value", "label", "category"})


def _aware(ts: datetime) -> datetime:
    return ts.replace(tzinfo=UTC) if ts.tzinfo is None else ts


class InMemoryEventStore:
    """In-memory event store for testing/dev."""

    def __init__(self) -> None:
        self._records: dict[RecordSource, list[MetricRecord]] = {s: [] for s in RecordSource}

    def add(self, source: RecordSource, record: MetricRecord) -> None:
        """Append a record to a source."""
        self._records[RecordSource(source)].append(record)

    def add_many(self, source: RecordSource, records: Iterable[MetricRecord]) -> None:
        for record in records:
            self.add(source, record)

    def _matching(self, filter: EventFilter | None) -> list[MetricRecord]:
        if filter is None:
            return [r for records in self._records.values() for r in records]

        results = []
        for record in self._records[RecordSource(filter.source)]:
            ts = _aware(record.timestamp)
            if filter.since is not None and ts < _aware(filter.since):
                continue
            if filter.until is not None and ts > _aware(filter.until):
                continue
            results.append(record)
        return results

    def count(self, filter: EventFilter | None = None) -> int:
        return len(self._matching(filter))

    def find_many(
        self,
        filter: EventFilter,
        options: FindOptions | None = None,
    ) -> list[MetricRecord]:
        """Find records. ``select`` is accepted but full records are returned."""
        options = options or FindOptions()
        results = self._matching(filter)

        if options.order_by is not None:
            if options.order_by not in _ORDERABLE_FIELDS:
                msg = f"Cannot order by: {options.order_by}"
                raise ValueError(msg)
            results = sorted(
                results,
                key=lambda r: _sort_value(r, options.order_by),  # type: ignore[arg-type]
                reverse=options.descending,
            )

        if options.limit is not None:
            results = results[: options.limit]

        return results

    def sum_field(self, field_name: str, filter: EventFilter | None = None) -> float:
        if field_name != "value":
            msg = f"Cannot sum non-numeric field: {field_name}"
            raise ValueError(msg)
        return sum(r.value or 0 for r in self._matching(filter))

    def clear(self) -> None:
        """Clear all records."""
        for records in self._records.values():
            records.clear()


def _sort_value(record: MetricRecord, field_name: str) -> Any:
    value = getattr(record, field_name)
    if field_name == "value":
        return value or 0
    if field_name == "timestamp":
        return _aware(value)
    return value or ""
