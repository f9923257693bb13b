"""Sleep session clusterer: merge the sessions around a date into one interval.

Handles sessions crossing midnight in both directions:

- a session that started the evening before ``day`` pulls the start back,
  but only sessions that *start* within the lookback window are ever read,
  so nothing earlier than ``day - SLEEP_LOOKBACK_DAYS`` can contribute;
- a session running past the end of ``day`` is clamped to the next local
  midnight instead of reporting its true end.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta, tzinfo

from src.datasources.base import HealthRecord, MetricType, SessionCluster, start_of_day
from src.datasources.fanout import join_all, unwrap_result
from src.datasources.priority_entries import PriorityEntriesAggregator
from src.datasources.results import (
    Failed,
    InvalidMetricForOperation,
    Success,
    UseCaseResult,
    failure,
)

logger = logging.getLogger("datasources.sleep")

#: Days before the target date whose sessions are read.  Sessions starting
#: earlier never contribute to a cluster.
SLEEP_LOOKBACK_DAYS = 1


class SessionClusterer:
    """Cluster prioritized session records touching a target date.

    Usage::

        clusterer = SessionClusterer(entries_aggregator, tz)
        result = await clusterer.cluster(date(2023, 2, 13))
        cluster = result.data   # SessionCluster(start=..., end=...) or None
    """

    def __init__(self, entries: PriorityEntriesAggregator, tz: tzinfo) -> None:
        self._entries = entries
        self._tz = tz

    async def cluster(
        self, day: date, metric_type: MetricType = MetricType.SLEEP
    ) -> UseCaseResult[SessionCluster | None]:
        """Return the merged [start, end) of the sessions touching ``day``.

        Args:
            day:         Target local date.
            metric_type: Session-shaped metric to cluster.

        Returns:
            ``Success(SessionCluster)``, ``Success(None)`` when no session
            starts on ``day`` or the day before, ``Failed(InvalidMetricForOperation)``
            for non-session metrics, or ``Failed`` when a read failed.
        """
        if not metric_type.is_session:
            return Failed(
                InvalidMetricForOperation(
                    f"{metric_type.value} is not a session metric and cannot be clustered"
                )
            )

        try:
            sessions = await self._sessions_around(metric_type, day)
        except Exception as exc:
            return failure(f"cluster({metric_type.value}, {day})", exc)

        return Success(self._merge(sessions, day))

    async def _sessions_around(
        self, metric_type: MetricType, day: date
    ) -> list[HealthRecord]:
        days = [day - timedelta(days=offset) for offset in range(SLEEP_LOOKBACK_DAYS + 1)]
        per_day = await join_all(
            unwrap_result(self._entries.entries(metric_type, d)) for d in days
        )
        return [record for records in per_day for record in records]

    def _merge(self, sessions: list[HealthRecord], day: date) -> SessionCluster | None:
        if not sessions:
            logger.debug("No sessions on %s or the %d day(s) before", day, SLEEP_LOOKBACK_DAYS)
            return None

        min_start = min(s.start_time for s in sessions)
        max_end = max(s.effective_end for s in sessions)

        clamp_boundary = start_of_day(day + timedelta(days=1), self._tz)
        if max_end > clamp_boundary:
            logger.debug("Clamping cluster end %s to %s", max_end, clamp_boundary)
            max_end = clamp_boundary

        if max_end <= min_start:
            logger.debug("Sessions around %s have no duration; no cluster", day)
            return None

        cluster = SessionCluster(start=min_start, end=max_end)
        logger.debug(
            "Clustered %d sessions around %s → [%s, %s)",
            len(sessions), day, cluster.start, cluster.end,
        )
        return cluster
