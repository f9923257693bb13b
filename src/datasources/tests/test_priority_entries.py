"""Tests for PriorityEntriesAggregator — one local day of prioritized records."""

from __future__ import annotations

from datetime import date
from zoneinfo import ZoneInfo

import pytest

from src.datasources.base import DataCategory, MetricType, TimeRange
from src.datasources.priority_entries import PriorityEntriesAggregator
from src.datasources.results import Failed, StoreUnavailable, Success
from src.datasources.stores.memory import InMemoryHealthDataStore, StaticPriorityListProvider
from src.datasources.tests.factories import (
    FITNESS_APP,
    OTHER_APP,
    UTC,
    WATCH_APP,
    at,
    make_sleep,
    make_steps,
    priority_lists,
)


class TestEntries:
    @pytest.mark.asyncio
    async def test_returns_prioritized_records_sorted_by_start(
        self, store: InMemoryHealthDataStore, entries: PriorityEntriesAggregator
    ) -> None:
        late = make_steps(WATCH_APP, at(2023, 11, 2, 18))
        early = make_steps(FITNESS_APP, at(2023, 11, 2, 7))
        store.add(late, make_steps(OTHER_APP, at(2023, 11, 2, 12)), early)

        result = await entries.entries(MetricType.STEPS, date(2023, 11, 2))

        assert result == Success([early, late])

    @pytest.mark.asyncio
    async def test_only_records_starting_on_the_day(
        self, store: InMemoryHealthDataStore, entries: PriorityEntriesAggregator
    ) -> None:
        crossing = make_sleep(FITNESS_APP, at(2023, 11, 1, 22), at(2023, 11, 2, 6))
        on_day = make_sleep(FITNESS_APP, at(2023, 11, 2, 22), at(2023, 11, 3, 6))
        store.add(crossing, on_day)

        result = await entries.entries(MetricType.SLEEP, date(2023, 11, 2))

        assert result == Success([on_day])

    @pytest.mark.asyncio
    async def test_reads_every_source_for_the_local_day(
        self, store: InMemoryHealthDataStore, entries: PriorityEntriesAggregator
    ) -> None:
        await entries.entries(MetricType.STEPS, date(2023, 11, 2))

        (call,) = store.calls_to("read_records")
        assert call.source is None
        assert call.time_range == TimeRange(at(2023, 11, 2), at(2023, 11, 3))

    @pytest.mark.asyncio
    async def test_empty_result_is_success(self, entries: PriorityEntriesAggregator) -> None:
        assert await entries.entries(MetricType.STEPS, date(2023, 11, 2)) == Success([])

    @pytest.mark.asyncio
    async def test_empty_priority_list_skips_the_store(
        self, store: InMemoryHealthDataStore
    ) -> None:
        store.add(make_steps(FITNESS_APP, at(2023, 11, 2, 7)))
        provider = StaticPriorityListProvider({DataCategory.SLEEP: [FITNESS_APP]})
        aggregator = PriorityEntriesAggregator(store, provider, UTC)

        result = await aggregator.entries(MetricType.STEPS, date(2023, 11, 2))

        assert result == Success([])
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_local_day_follows_the_zone(self) -> None:
        tokyo = ZoneInfo("Asia/Tokyo")
        # 16:00 UTC on 11-01 is 01:00 on 11-02 in Tokyo
        record = make_steps(FITNESS_APP, at(2023, 11, 1, 16))
        store = InMemoryHealthDataStore([record], tz=tokyo)
        provider = StaticPriorityListProvider(priority_lists(FITNESS_APP))
        aggregator = PriorityEntriesAggregator(store, provider, tokyo)

        assert await aggregator.entries(MetricType.STEPS, date(2023, 11, 2)) == Success([record])
        assert await aggregator.entries(MetricType.STEPS, date(2023, 11, 1)) == Success([])

    @pytest.mark.asyncio
    async def test_store_failure_is_surfaced(
        self, store: InMemoryHealthDataStore, entries: PriorityEntriesAggregator
    ) -> None:
        store.failures["read_records"] = OSError("disk error")

        result = await entries.entries(MetricType.STEPS, date(2023, 11, 2))

        assert isinstance(result, Failed)
        assert isinstance(result.error, StoreUnavailable)
