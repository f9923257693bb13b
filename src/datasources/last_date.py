"""Find the most recent local date holding data from a prioritized source.

The store's activity-date index is used as a cheap pre-filter: it covers
every source, so it only narrows the window.  The per-source reads then
start at the earliest activity date inside the rolling window instead of
scanning the full window for each source.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, tzinfo

from src.datasources.base import (
    HealthDataStore,
    HealthRecord,
    MetricType,
    PriorityList,
    PriorityListProvider,
    SourceId,
    TimeRange,
    local_date,
    start_of_day,
)
from src.datasources.config_loader import DataSourcesConfig, get_datasources_config
from src.datasources.fanout import join_all
from src.datasources.priority_filter import filter_priority_records
from src.datasources.results import Success, UseCaseResult, failure

logger = logging.getLogger("datasources.last_date")


class LastPriorityDateResolver:
    """Resolve the last local date with data from the priority list.

    Usage::

        resolver = LastPriorityDateResolver(store, priority_provider, tz)
        result = await resolver.resolve(MetricType.STEPS, now)
        if result.is_success:
            print(result.data)   # date(2023, 11, 2) or None
    """

    def __init__(
        self,
        store: HealthDataStore,
        priority_provider: PriorityListProvider,
        tz: tzinfo,
        config: DataSourcesConfig | None = None,
    ) -> None:
        self._store = store
        self._priority_provider = priority_provider
        self._tz = tz
        self._config = config or get_datasources_config()

    async def resolve(
        self, metric_type: MetricType, now: datetime
    ) -> UseCaseResult[date | None]:
        """Return the last local date on which a prioritized source has data.

        Args:
            metric_type: Metric to look for.
            now:         Aware timestamp bounding the search; future data never counts.

        Returns:
            ``Success(date)``, ``Success(None)`` when no prioritized data exists
            in the rolling window, or ``Failed`` if any collaborator call failed.
        """
        try:
            last_date = await self._resolve(metric_type, now)
        except Exception as exc:
            return failure(f"resolve({metric_type.value})", exc)
        logger.debug("Last priority date for %s: %s", metric_type.value, last_date)
        return Success(last_date)

    async def _resolve(self, metric_type: MetricType, now: datetime) -> date | None:
        priority = await self._priority_provider.get_priority_list(metric_type.category)
        if not priority:
            logger.debug(
                "Empty priority list for %s; skipping store reads",
                metric_type.category.value,
            )
            return None

        window_start = await self._earliest_recent_activity_date(metric_type, now)
        if window_start is None:
            return None

        read_range = TimeRange(start_of_day(window_start, self._tz), now)
        per_source = await join_all(
            self._read_source(metric_type, read_range, source, priority)
            for source in priority
        )

        latest: datetime | None = None
        for records in per_source:
            for record in records:
                if latest is None or record.start_time > latest:
                    latest = record.start_time
        if latest is None:
            return None
        return local_date(latest, self._tz)

    async def _earliest_recent_activity_date(
        self, metric_type: MetricType, now: datetime
    ) -> date | None:
        """Return the earliest activity date inside the rolling window, if any."""
        today = local_date(now, self._tz)
        oldest = today - timedelta(days=self._config.lookback_days)
        window = TimeRange(
            start_of_day(oldest, self._tz),
            start_of_day(today + timedelta(days=1), self._tz),
        )

        activity_dates = await self._store.list_activity_dates(metric_type, window)
        recent = [d for d in activity_dates if oldest <= d <= today]
        logger.debug(
            "%s: %d activity dates, %d inside [%s, %s]",
            metric_type.value, len(activity_dates), len(recent), oldest, today,
        )
        return min(recent) if recent else None

    async def _read_source(
        self,
        metric_type: MetricType,
        read_range: TimeRange,
        source: SourceId,
        priority: PriorityList,
    ) -> list[HealthRecord]:
        records = await self._store.read_records(metric_type, read_range, source=source)
        return filter_priority_records(records, priority)
