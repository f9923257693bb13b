"""Shared FastAPI dependencies injected into route handlers.

Collaborators are built per request; nothing is cached between calls
except the settings and the connection pool.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from src.config import Settings, get_settings
from src.datasources.aggregations import RecordTotalsAggregator
from src.datasources.last_date import LastPriorityDateResolver
from src.datasources.potential_sources import PotentialPriorityListLoader
from src.datasources.priority_entries import PriorityEntriesAggregator
from src.datasources.recent_summaries import RecentSummaryBuilder
from src.datasources.sleep_sessions import SessionClusterer
from src.datasources.stores.postgres import (
    PostgresHealthDataStore,
    PostgresPriorityListProvider,
    PostgresWriteAccessReader,
)


def get_summary_builder(
    settings: Annotated[Settings, Depends(get_settings)],
) -> RecentSummaryBuilder:
    tz = settings.tz
    store = PostgresHealthDataStore(settings.local_timezone)
    priority = PostgresPriorityListProvider()
    entries = PriorityEntriesAggregator(store, priority, tz)
    return RecentSummaryBuilder(
        resolver=LastPriorityDateResolver(store, priority, tz),
        clusterer=SessionClusterer(entries, tz),
        aggregator=RecordTotalsAggregator(store, priority),
        tz=tz,
    )


def get_potential_sources_loader(
    settings: Annotated[Settings, Depends(get_settings)],
) -> PotentialPriorityListLoader:
    return PotentialPriorityListLoader(
        store=PostgresHealthDataStore(settings.local_timezone),
        write_access=PostgresWriteAccessReader(),
        priority_provider=PostgresPriorityListProvider(),
    )


# Annotated shortcuts for route signatures
SummaryBuilder = Annotated[RecentSummaryBuilder, Depends(get_summary_builder)]
PotentialSources = Annotated[PotentialPriorityListLoader, Depends(get_potential_sources_loader)]
