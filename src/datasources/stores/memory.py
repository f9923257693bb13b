"""In-memory collaborators for local development and tests.

Each store records the calls it receives so callers can assert on the
reads actually issued, and can be told to fail a given operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timezone, tzinfo
from typing import Iterable

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
    local_date,
)


@dataclass(frozen=True)
class StoreCall:
    """One recorded store call."""

    operation: str
    metric_type: MetricType | None = None
    time_range: TimeRange | None = None
    source: SourceId | None = None


class InMemoryHealthDataStore(HealthDataStore):
    """Health data store holding its records in a list.

    Args:
        records:  Initial records.
        tz:       Zone used to derive activity dates.
        failures: operation name → exception raised by that operation
                  ('list_activity_dates', 'read_records', 'list_contributing_sources').
    """

    def __init__(
        self,
        records: Iterable[HealthRecord] = (),
        tz: tzinfo | None = None,
        failures: dict[str, Exception] | None = None,
    ) -> None:
        self._records: list[HealthRecord] = list(records)
        self._tz = tz or timezone.utc
        self.failures: dict[str, Exception] = dict(failures or {})
        self.calls: list[StoreCall] = []

    def add(self, *records: HealthRecord) -> None:
        self._records.extend(records)

    def calls_to(self, operation: str) -> list[StoreCall]:
        return [c for c in self.calls if c.operation == operation]

    def _maybe_fail(self, operation: str) -> None:
        exc = self.failures.get(operation)
        if exc is not None:
            raise exc

    async def list_activity_dates(
        self, metric_type: MetricType, time_range: TimeRange
    ) -> list[date]:
        self.calls.append(StoreCall("list_activity_dates", metric_type, time_range))
        self._maybe_fail("list_activity_dates")
        return sorted(
            {
                local_date(r.start_time, self._tz)
                for r in self._records
                if r.metric_type is metric_type and time_range.contains(r.start_time)
            }
        )

    async def read_records(
        self,
        metric_type: MetricType,
        time_range: TimeRange,
        source: SourceId | None = None,
    ) -> list[HealthRecord]:
        self.calls.append(StoreCall("read_records", metric_type, time_range, source))
        self._maybe_fail("read_records")
        matching = [
            r
            for r in self._records
            if r.metric_type is metric_type
            and time_range.contains(r.start_time)
            and (source is None or r.source == source)
        ]
        # Newest first, like the platform store
        return sorted(matching, key=lambda r: r.start_time, reverse=True)

    async def list_contributing_sources(self, category: DataCategory) -> set[SourceId]:
        self.calls.append(StoreCall("list_contributing_sources"))
        self._maybe_fail("list_contributing_sources")
        return {r.source for r in self._records if r.metric_type.category is category}


class StaticPriorityListProvider(PriorityListProvider):
    """Priority lists fixed at construction time."""

    def __init__(
        self,
        lists: dict[DataCategory, PriorityList] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._lists = {category: list(sources) for category, sources in (lists or {}).items()}
        self.error = error
        self.calls: list[DataCategory] = []

    async def get_priority_list(self, category: DataCategory) -> PriorityList:
        self.calls.append(category)
        if self.error is not None:
            raise self.error
        return list(self._lists.get(category, []))


class StaticWriteAccessReader(WriteAccessReader):
    """Write grants fixed at construction time."""

    def __init__(self, grants: dict[DataCategory, set[SourceId]] | None = None) -> None:
        self._grants = grants or {}

    async def sources_with_write_access(self, category: DataCategory) -> set[SourceId]:
        return set(self._grants.get(category, set()))
