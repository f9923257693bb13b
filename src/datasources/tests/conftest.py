"""Shared fixtures for the priority data-source tests."""

from __future__ import annotations

import pytest

from src.datasources.config_loader import DataSourcesConfig, load_datasources_config
from src.datasources.priority_entries import PriorityEntriesAggregator
from src.datasources.sleep_sessions import SessionClusterer
from src.datasources.stores.memory import InMemoryHealthDataStore, StaticPriorityListProvider
from src.datasources.tests.factories import FITNESS_APP, UTC, WATCH_APP, priority_lists


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def datasources_config() -> DataSourcesConfig:
    """Load the real bundled config for tests."""
    return load_datasources_config()


# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> InMemoryHealthDataStore:
    """An empty in-memory store bucketing dates in UTC."""
    return InMemoryHealthDataStore(tz=UTC)


@pytest.fixture
def provider() -> StaticPriorityListProvider:
    """Priority list [fitness, watch] for every category."""
    return StaticPriorityListProvider(priority_lists(FITNESS_APP, WATCH_APP))


@pytest.fixture
def entries(
    store: InMemoryHealthDataStore, provider: StaticPriorityListProvider
) -> PriorityEntriesAggregator:
    return PriorityEntriesAggregator(store, provider, UTC)


@pytest.fixture
def clusterer(entries: PriorityEntriesAggregator) -> SessionClusterer:
    return SessionClusterer(entries, UTC)
