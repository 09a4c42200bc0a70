"""
SQLite event store adapter.

Implements EventStorePort over a single ``metric_records`` table. Timestamps
are stored as UTC ISO-8601 text with fixed precision so text comparison
orders them correctly.
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterable
from contextlib import AbstractContextManager, nullcontext
from datetime import UTC, datetime
from typing import Any

from src.components.analytics.models import (
    EventFilter,
    FindOptions,
    MetricRecord,
    RecordSource,
)

_COLUMNS = ("entity_id", "timestamp", "category", "value", "label")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS metric_records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    source TEXT NOT NULL,
    entity_id TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    category TEXT,
    value REAL,
    label TEXT
);
CREATE INDEX IF NOT EXISTS idx_metric_records_source_ts
    ON metric_records (source, timestamp);
"""


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def format_ts(ts: datetime) -> str:
    """Store format: UTC, microsecond precision."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC).isoformat(timespec="microseconds")


def to_number(value: float | int | None) -> float | int | None:
    """Whole-number REAL values come back as int."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class SQLiteEventStore:
    """
    SQLite implementation of EventStorePort.

    An injected connection is shared: access to it is serialized and reads
    stay on the calling thread (see ``concurrent_reads``).
    """

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection
        self._lock = threading.Lock()
        if connection is not None:
            connection.row_factory = dict_factory

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        # Report queries may run on worker threads
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = dict_factory
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    def _guard(self) -> AbstractContextManager[Any]:
        """Serialize use of the external connection."""
        return self._lock if self._external_conn is not None else nullcontext()

    @property
    def concurrent_reads(self) -> bool:
        """Whether reads may run on worker threads."""
        return self._external_conn is None

    def init_schema(self) -> None:
        with self._guard():
            conn = self._get_conn()
            try:
                conn.executescript(_SCHEMA)
                conn.commit()
            finally:
                if self._should_close():
                    conn.close()

    def add_many(self, source: RecordSource, records: Iterable[MetricRecord]) -> None:
        """Insert records for a source (seeding and tests)."""
        rows = [
            (
                RecordSource(source).value,
                r.entity_id,
                format_ts(r.timestamp),
                r.category,
                r.value,
                r.label,
            )
            for r in records
        ]
        with self._guard():
            conn = self._get_conn()
            try:
                conn.executemany(
                    "INSERT INTO metric_records "
                    "(source, entity_id, timestamp, category, value, label) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    rows,
                )
                conn.commit()
            finally:
                if self._should_close():
                    conn.close()

    def _where(self, filter: EventFilter | None) -> tuple[str, list[Any]]:
        query = " WHERE 1=1"
        params: list[Any] = []

        if filter is None:
            return query, params

        query += " AND source = ?"
        params.append(RecordSource(filter.source).value)

        if filter.since is not None:
            query += " AND timestamp >= ?"
            params.append(format_ts(filter.since))

        if filter.until is not None:
            query += " AND timestamp <= ?"
            params.append(format_ts(filter.until))

        return query, params

    def count(self, filter: EventFilter | None = None) -> int:
        where, params = self._where(filter)
        with self._guard():
            conn = self._get_conn()
            try:
                row = conn.execute(
                    f"SELECT COUNT(*) AS n FROM metric_records{where}", params
                ).fetchone()
                return row["n"] if row else 0
            finally:
                if self._should_close():
                    conn.close()

    def find_many(
        self,
        filter: EventFilter,
        options: FindOptions | None = None,
    ) -> list[MetricRecord]:
        options = options or FindOptions()

        selected = set(options.select or _COLUMNS) | {"entity_id", "timestamp"}
        unknown = selected - set(_COLUMNS)
        if unknown:
            msg = f"Unknown columns: {sorted(unknown)}"
            raise ValueError(msg)
        columns = [c for c in _COLUMNS if c in selected]

        where, params = self._where(filter)
        query = f"SELECT {', '.join(columns)} FROM metric_records{where}"

        if options.order_by is not None:
            if options.order_by not in _COLUMNS:
                msg = f"Cannot order by: {options.order_by}"
                raise ValueError(msg)
            direction = "DESC" if options.descending else "ASC"
            # id keeps ties in insertion order
            query += f" ORDER BY COALESCE({options.order_by}, 0) {direction}, id ASC"
        else:
            query += " ORDER BY id ASC"

        if options.limit is not None:
            query += " LIMIT ?"
            params.append(options.limit)

        with self._guard():
            conn = self._get_conn()
            try:
                rows = conn.execute(query, params).fetchall()
                return [self._map_row(row) for row in rows]
            finally:
                if self._should_close():
                    conn.close()

    def sum_field(self, field_name: str, filter: EventFilter | None = None) -> float:
        if field_name != "value":
            msg = f"Cannot sum non-numeric field: {field_name}"
            raise ValueError(msg)

        where, params = self._where(filter)
        with self._guard():
            conn = self._get_conn()
            try:
                row = conn.execute(
                    f"SELECT SUM(value) AS total FROM metric_records{where}", params
                ).fetchone()
                if row is None:
                    return 0
                return to_number(row["total"]) or 0
            finally:
                if self._should_close():
                    conn.close()

    def _map_row(self, row: dict[str, Any]) -> MetricRecord:
        return MetricRecord(
            entity_id=row["entity_id"],
            timestamp=datetime.fromisoformat(row["timestamp"]),
            category=row.get("category"),
            value=to_number(row.get("value")),
            label=row.get("label"),
        )
