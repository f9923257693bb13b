"""Build the most-recent summary cards for a data category.

For each configured metric of the category, finds the last date with
prioritized data, widens it to a sleep cluster for session metrics, and
asks the aggregator for the value over that interval.  The first failure
anywhere aborts the whole build; metrics without data are omitted.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone, tzinfo
from typing import Callable

from src.datasources.base import (
    Aggregator,
    DataCategory,
    MetricType,
    SummaryCard,
    TimeRange,
    local_date,
)
from src.datasources.config_loader import DataSourcesConfig, get_datasources_config
from src.datasources.last_date import LastPriorityDateResolver
from src.datasources.results import Failed, Success, UseCaseResult, failure
from src.datasources.sleep_sessions import SessionClusterer

logger = logging.getLogger("datasources.recent_summaries")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecentSummaryBuilder:
    """Assemble the ordered summary cards shown for a data category.

    Usage::

        builder = RecentSummaryBuilder(resolver, clusterer, aggregator, tz)
        result = await builder.build_summaries(DataCategory.ACTIVITY)
        for card in result.data:
            print(card.metric_type, card.aggregated_value)
    """

    def __init__(
        self,
        resolver: LastPriorityDateResolver,
        clusterer: SessionClusterer,
        aggregator: Aggregator,
        tz: tzinfo,
        config: DataSourcesConfig | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._resolver = resolver
        self._clusterer = clusterer
        self._aggregator = aggregator
        self._tz = tz
        self._config = config or get_datasources_config()
        self._clock = clock

    async def build_summaries(
        self, category: DataCategory
    ) -> UseCaseResult[list[SummaryCard]]:
        """Return one card per configured metric of ``category`` that has priority data.

        Returns:
            ``Success(cards)`` in configured metric order (possibly empty), or
            the first ``Failed`` met by any metric.
        """
        now = self._clock()
        cards: list[SummaryCard] = []

        for metric_type in self._config.metrics_for(category):
            result = await self._build_card(metric_type, now)
            if isinstance(result, Failed):
                return result
            if result.data is not None:
                cards.append(result.data)

        logger.info(
            "Built %d summary card(s) for %s: %s",
            len(cards), category.value, [c.metric_type.value for c in cards],
        )
        return Success(cards)

    async def _build_card(
        self, metric_type: MetricType, now: datetime
    ) -> UseCaseResult[SummaryCard | None]:
        date_result = await self._resolver.resolve(metric_type, now)
        if isinstance(date_result, Failed):
            return date_result
        last_date: date | None = date_result.data
        if last_date is None:
            logger.debug("No priority data for %s; omitting card", metric_type.value)
            return Success(None)

        if metric_type.is_session:
            cluster_result = await self._clusterer.cluster(last_date, metric_type)
            if isinstance(cluster_result, Failed):
                return cluster_result
            cluster = cluster_result.data
            if cluster is None:
                logger.debug("No %s cluster around %s; omitting card", metric_type.value, last_date)
                return Success(None)
            time_range = cluster.time_range
            start_date = local_date(cluster.start, self._tz)
            end_date = local_date(cluster.end, self._tz)
        else:
            time_range = TimeRange.for_day(last_date, self._tz)
            start_date = end_date = last_date

        try:
            value = await self._aggregator.aggregate(metric_type, time_range)
        except Exception as exc:
            return failure(f"aggregate({metric_type.value})", exc)

        return Success(
            SummaryCard(
                metric_type=metric_type,
                aggregated_value=value,
                start_date=start_date,
                end_date=end_date,
                time_range=time_range,
            )
        )
