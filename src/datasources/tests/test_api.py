"""Tests for the data-source HTTP endpoints over in-memory collaborators."""

from __future__ import annotations

from typing import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from src.config import Settings, get_settings
from src.datasources.base import DataCategory
from src.datasources.config_loader import DataSourcesConfig, get_datasources_config
from src.datasources.potential_sources import PotentialPriorityListLoader
from src.datasources.results import Failed, InvalidMetricForOperation
from src.datasources.stores.memory import (
    InMemoryHealthDataStore,
    StaticPriorityListProvider,
    StaticWriteAccessReader,
)
from src.datasources.tests.factories import (
    FITNESS_APP,
    OTHER_APP,
    WATCH_APP,
    at,
    build_summary_builder,
    make_sleep,
    make_steps,
)
from src.dependencies import get_potential_sources_loader, get_summary_builder
from src.main import app
from src.routers import health


@pytest.fixture
def client() -> Iterator[TestClient]:
    # Not entered as a context manager so the lifespan never opens a pool
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def wired_store(
    store: InMemoryHealthDataStore,
    provider: StaticPriorityListProvider,
    datasources_config: DataSourcesConfig,
) -> InMemoryHealthDataStore:
    builder = build_summary_builder(store, provider, datasources_config, at(2023, 11, 7, 12))
    loader = PotentialPriorityListLoader(
        store, StaticWriteAccessReader({DataCategory.ACTIVITY: {OTHER_APP}}), provider
    )
    app.dependency_overrides[get_summary_builder] = lambda: builder
    app.dependency_overrides[get_potential_sources_loader] = lambda: loader
    return store


class TestRecentEndpoint:
    def test_activity_cards(self, client: TestClient, wired_store: InMemoryHealthDataStore) -> None:
        wired_store.add(
            make_steps(FITNESS_APP, at(2023, 11, 5, 8), 1200),
            make_steps(WATCH_APP, at(2023, 11, 5, 18), 300),
        )

        response = client.get("/api/v1/data-sources/activity/recent")

        assert response.status_code == 200
        (card,) = response.json()
        assert card["metric_type"] == "steps"
        assert card["start_date"] == card["end_date"] == "2023-11-05"
        assert card["aggregated_value"] == {
            "value": 1500.0,
            "unit": "steps",
            "sources": [FITNESS_APP, WATCH_APP],
        }

    def test_sleep_card_spans_two_dates(
        self, client: TestClient, wired_store: InMemoryHealthDataStore
    ) -> None:
        wired_store.add(
            make_sleep(FITNESS_APP, at(2023, 11, 5, 23), at(2023, 11, 6, 7)),
            make_sleep(WATCH_APP, at(2023, 11, 6, 14), at(2023, 11, 6, 15)),
        )

        response = client.get("/api/v1/data-sources/sleep/recent")

        assert response.status_code == 200
        (card,) = response.json()
        assert card["start_date"] == "2023-11-05"
        assert card["end_date"] == "2023-11-06"
        # 23:00 to 07:00 plus the afternoon nap
        assert card["aggregated_value"]["value"] == 540.0

    def test_no_data_is_an_empty_list(
        self, client: TestClient, wired_store: InMemoryHealthDataStore
    ) -> None:
        response = client.get("/api/v1/data-sources/vitals/recent")
        assert response.status_code == 200
        assert response.json() == []

    def test_store_failure_is_503(
        self, client: TestClient, wired_store: InMemoryHealthDataStore
    ) -> None:
        wired_store.failures["list_activity_dates"] = ConnectionError("offline")

        response = client.get("/api/v1/data-sources/activity/recent")

        assert response.status_code == 503

    def test_other_failures_are_500(self, client: TestClient) -> None:
        builder = MagicMock()
        builder.build_summaries = AsyncMock(
            return_value=Failed(InvalidMetricForOperation("steps is not a session metric"))
        )
        app.dependency_overrides[get_summary_builder] = lambda: builder

        response = client.get("/api/v1/data-sources/sleep/recent")

        assert response.status_code == 500
        assert "session metric" in response.json()["detail"]

    def test_unknown_category_is_422(self, client: TestClient, wired_store) -> None:
        assert client.get("/api/v1/data-sources/nutrition/recent").status_code == 422


class TestPotentialSourcesEndpoint:
    def test_lists_unprioritized_sources(
        self, client: TestClient, wired_store: InMemoryHealthDataStore
    ) -> None:
        wired_store.add(make_steps("com.example.scale", at(2023, 11, 5, 8)))

        response = client.get("/api/v1/data-sources/activity/potential-sources")

        assert response.status_code == 200
        assert response.json() == {
            "category": "activity",
            "sources": ["com.example.other", "com.example.scale"],
        }

    def test_store_failure_is_503(
        self, client: TestClient, wired_store: InMemoryHealthDataStore
    ) -> None:
        wired_store.failures["list_contributing_sources"] = TimeoutError("slow")

        response = client.get("/api/v1/data-sources/activity/potential-sources")

        assert response.status_code == 503


class TestHealthEndpoint:
    def test_healthy_when_store_answers(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(health, "fetchval", AsyncMock(return_value=1))

        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["store"] == "connected"

    def test_reports_calendar_zone_and_summary_config(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(health, "fetchval", AsyncMock(return_value=1))

        body = client.get("/health").json()

        assert body["local_timezone"] == get_settings().local_timezone
        assert body["config_version"] == get_datasources_config().version
        assert body["lookback_days"] == get_datasources_config().lookback_days

    def test_degraded_when_store_is_unreachable(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            health, "fetchval", AsyncMock(side_effect=OSError("connection refused"))
        )

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["store"] == "unreachable"


class TestSettings:
    def test_timezone_is_validated(self) -> None:
        with pytest.raises(ValueError, match="Unknown timezone"):
            Settings(local_timezone="Mars/Olympus_Mons")

    def test_tz_property(self) -> None:
        assert Settings(local_timezone="Europe/Berlin").tz.key == "Europe/Berlin"
