"""Sources that could be added to a category's priority list."""

from __future__ import annotations

import logging

from src.datasources.base import (
    DataCategory,
    HealthDataStore,
    PriorityListProvider,
    SourceId,
    WriteAccessReader,
)
from src.datasources.fanout import join_all
from src.datasources.results import Success, UseCaseResult, failure

logger = logging.getLogger("datasources.potential_sources")


class PotentialPriorityListLoader:
    """Load sources with data or write access in a category that are not yet prioritized."""

    def __init__(
        self,
        store: HealthDataStore,
        write_access: WriteAccessReader,
        priority_provider: PriorityListProvider,
    ) -> None:
        self._store = store
        self._write_access = write_access
        self._priority_provider = priority_provider

    async def load(self, category: DataCategory) -> UseCaseResult[list[SourceId]]:
        """Return candidate sources for ``category``, sorted by identifier."""
        try:
            with_data, with_write_access, priority = await join_all(
                [
                    self._store.list_contributing_sources(category),
                    self._write_access.sources_with_write_access(category),
                    self._priority_provider.get_priority_list(category),
                ]
            )
        except Exception as exc:
            return failure(f"potential_sources({category.value})", exc)

        candidates = sorted((set(with_data) | set(with_write_access)) - set(priority))
        logger.debug(
            "%s: %d potential priority source(s)", category.value, len(candidates)
        )
        return Success(candidates)
