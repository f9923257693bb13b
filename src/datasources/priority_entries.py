"""Prioritized records of a metric for one local calendar day."""

from __future__ import annotations

import logging
from datetime import date, tzinfo

from src.datasources.base import (
    HealthDataStore,
    HealthRecord,
    MetricType,
    PriorityListProvider,
    TimeRange,
)
from src.datasources.priority_filter import filter_priority_records
from src.datasources.results import Success, UseCaseResult, failure

logger = logging.getLogger("datasources.priority_entries")


class PriorityEntriesAggregator:
    """Load the records of a metric starting on a date, from prioritized sources only."""

    def __init__(
        self,
        store: HealthDataStore,
        priority_provider: PriorityListProvider,
        tz: tzinfo,
    ) -> None:
        self._store = store
        self._priority_provider = priority_provider
        self._tz = tz

    async def entries(
        self, metric_type: MetricType, day: date
    ) -> UseCaseResult[list[HealthRecord]]:
        """Return the prioritized records of ``metric_type`` starting on ``day``.

        Records are sorted by start_time.  An empty list is a valid result.
        """
        try:
            records = await self._entries(metric_type, day)
        except Exception as exc:
            return failure(f"entries({metric_type.value}, {day})", exc)
        return Success(records)

    async def _entries(self, metric_type: MetricType, day: date) -> list[HealthRecord]:
        priority = await self._priority_provider.get_priority_list(metric_type.category)
        if not priority:
            return []

        records = await self._store.read_records(
            metric_type, TimeRange.for_day(day, self._tz)
        )
        prioritized = filter_priority_records(records, priority)
        logger.debug(
            "%s on %s: %d of %d records from priority sources",
            metric_type.value, day, len(prioritized), len(records),
        )
        return sorted(prioritized, key=lambda r: r.start_time)
