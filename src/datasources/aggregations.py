"""Aggregate prioritized records over an interval into a display value.

All aggregation parameters (units, strategy per metric) are declared in
the tables below; nothing is configured at runtime.
"""

from __future__ import annotations

import logging
import statistics
from datetime import datetime

from src.datasources.base import (
    AggregatedValue,
    Aggregator,
    HealthDataStore,
    HealthRecord,
    MetricType,
    PriorityListProvider,
    TimeRange,
)
from src.datasources.priority_filter import filter_priority_records

logger = logging.getLogger("datasources.aggregations")

METRIC_UNITS: dict[MetricType, str] = {
    MetricType.STEPS: "steps",
    MetricType.DISTANCE: "m",
    MetricType.TOTAL_CALORIES_BURNED: "kcal",
    MetricType.SLEEP: "min",
    MetricType.HEART_RATE: "bpm",
    MetricType.RESTING_HEART_RATE: "bpm",
}

# Metrics reported as an average rather than a total
_AVERAGED_METRICS = frozenset({MetricType.HEART_RATE, MetricType.RESTING_HEART_RATE})


def _covered_seconds(sessions: list[HealthRecord], time_range: TimeRange) -> float:
    """Return the seconds of ``time_range`` covered by at least one session.

    Overlapping sessions are counted once.

    Args:
        sessions:   Session records (end_time set).
        time_range: Interval the sessions are clipped to.

    Returns:
        Covered duration in seconds.
    """
    clipped: list[tuple[datetime, datetime]] = []
    for s in sessions:
        start = max(s.start_time, time_range.start)
        end = min(s.effective_end, time_range.end)
        if end > start:
            clipped.append((start, end))

    total = 0.0
    current_start: datetime | None = None
    current_end: datetime | None = None
    for start, end in sorted(clipped):
        if current_end is None or start > current_end:
            if current_start is not None and current_end is not None:
                total += (current_end - current_start).total_seconds()
            current_start, current_end = start, end
        elif end > current_end:
            current_end = end
    if current_start is not None and current_end is not None:
        total += (current_end - current_start).total_seconds()
    return total


class RecordTotalsAggregator(Aggregator):
    """Aggregator computing totals directly from prioritized store records.

    - cumulative metrics (steps, distance, calories): sum of values
    - session metrics (sleep): minutes covered by the union of sessions
    - vitals (heart rate): mean of values
    """

    def __init__(
        self, store: HealthDataStore, priority_provider: PriorityListProvider
    ) -> None:
        self._store = store
        self._priority_provider = priority_provider

    async def aggregate(
        self, metric_type: MetricType, time_range: TimeRange
    ) -> AggregatedValue:
        unit = METRIC_UNITS[metric_type]
        priority = await self._priority_provider.get_priority_list(metric_type.category)
        if not priority:
            return AggregatedValue(value=0.0, unit=unit)

        # Only sessions starting inside the range are read; session clusters
        # always begin at their earliest session start.
        records = filter_priority_records(
            await self._store.read_records(metric_type, time_range), priority
        )
        sources = sorted({r.source for r in records}, key=priority.index)

        if metric_type.is_session:
            value = round(_covered_seconds(records, time_range) / 60.0, 1)
        else:
            values = [r.value for r in records if r.value is not None]
            if not values:
                value = 0.0
            elif metric_type in _AVERAGED_METRICS:
                value = round(statistics.fmean(values), 1)
            else:
                value = float(sum(values))

        logger.debug(
            "Aggregated %s over [%s, %s): %s %s from %s",
            metric_type.value, time_range.start, time_range.end, value, unit, sources,
        )
        return AggregatedValue(value=value, unit=unit, sources=sources)
