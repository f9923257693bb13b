"""Postgres-backed collaborators.

Schema read by this module::

    health_records(record_id, metric_type, source, start_time timestamptz,
                   end_time timestamptz NULL, value double precision NULL)
    priority_lists(category, source, rank)
    source_write_access(category, source)

All queries are read-only.
"""

from __future__ import annotations

import logging
from datetime import date

import asyncpg

from src.datasources.base import (
    DataCategory,
    HealthDataStore,
    HealthRecord,
    MetricType,
    PriorityList,
    PriorityListProvider,
    SourceId,
    TimeRange,
    WriteAccessReader,
    metrics_in_category,
)
from src.services.database import fetch

logger = logging.getLogger("datasources.stores.postgres")


def _row_to_record(row: asyncpg.Record) -> HealthRecord:
    return HealthRecord(
        source=row["source"],
        metric_type=MetricType(row["metric_type"]),
        start_time=row["start_time"],
        end_time=row["end_time"],
        value=row["value"],
    )


class PostgresHealthDataStore(HealthDataStore):
    """Health data store over the ``health_records`` table.

    Args:
        tz_name: IANA zone used to bucket start_time into local dates.
        pool:    Connection pool; the application pool when None.
    """

    def __init__(self, tz_name: str, pool: asyncpg.Pool | None = None) -> None:
        self._tz_name = tz_name
        self._pool = pool

    async def list_activity_dates(
        self, metric_type: MetricType, time_range: TimeRange
    ) -> list[date]:
        rows = await fetch(
            """
            SELECT DISTINCT (start_time AT TIME ZONE $4)::date AS day
            FROM health_records
            WHERE metric_type = $1 AND start_time >= $2 AND start_time < $3
            ORDER BY day
            """,
            metric_type.value,
            time_range.start,
            time_range.end,
            self._tz_name,
            pool=self._pool,
        )
        return [r["day"] for r in rows]

    async def read_records(
        self,
        metric_type: MetricType,
        time_range: TimeRange,
        source: SourceId | None = None,
    ) -> list[HealthRecord]:
        conditions = ["metric_type = $1", "start_time >= $2", "start_time < $3"]
        params: list = [metric_type.value, time_range.start, time_range.end]
        if source is not None:
            conditions.append("source = $4")
            params.append(source)

        rows = await fetch(
            "SELECT source, metric_type, start_time, end_time, value FROM health_records "
            f"WHERE {' AND '.join(conditions)} ORDER BY start_time DESC",
            *params,
            pool=self._pool,
        )
        logger.debug(
            "read_records %s source=%s: %d rows", metric_type.value, source, len(rows)
        )
        return [_row_to_record(r) for r in rows]

    async def list_contributing_sources(self, category: DataCategory) -> set[SourceId]:
        rows = await fetch(
            "SELECT DISTINCT source FROM health_records WHERE metric_type = ANY($1::text[])",
            [m.value for m in metrics_in_category(category)],
            pool=self._pool,
        )
        return {r["source"] for r in rows}


class PostgresPriorityListProvider(PriorityListProvider):
    """Priority lists stored in ``priority_lists``, ordered by rank."""

    def __init__(self, pool: asyncpg.Pool | None = None) -> None:
        self._pool = pool

    async def get_priority_list(self, category: DataCategory) -> PriorityList:
        rows = await fetch(
            "SELECT source FROM priority_lists WHERE category = $1 ORDER BY rank",
            category.value,
            pool=self._pool,
        )
        priority: PriorityList = []
        for r in rows:
            if r["source"] not in priority:
                priority.append(r["source"])
        return priority


class PostgresWriteAccessReader(WriteAccessReader):
    """Write grants stored in ``source_write_access``."""

    def __init__(self, pool: asyncpg.Pool | None = None) -> None:
        self._pool = pool

    async def sources_with_write_access(self, category: DataCategory) -> set[SourceId]:
        rows = await fetch(
            "SELECT DISTINCT source FROM source_write_access WHERE category = $1",
            category.value,
            pool=self._pool,
        )
        return {r["source"] for r in rows}
