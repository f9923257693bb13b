"""Priority data-source summaries.

Resolves, per metric type, the most recent local date with data from the
user's prioritized sources, clusters sleep sessions around that date, and
assembles the summary cards shown for a data category.

Subpackages:
    stores/ — In-memory and Postgres implementations of the collaborators

Core modules:
    base              — Canonical models and collaborator ABCs
    results           — Success/Failed results and the error taxonomy
    fanout            — Concurrent join over independent store reads
    priority_filter   — Keep records from prioritized sources
    last_date         — LastPriorityDateResolver
    priority_entries  — PriorityEntriesAggregator
    sleep_sessions    — SessionClusterer
    aggregations      — RecordTotalsAggregator
    recent_summaries  — RecentSummaryBuilder (entry point)
    potential_sources — Candidate sources for a priority list
    config_loader     — Load/validate/hot-reload datasources_config.yaml
"""

from src.datasources.base import (
    AggregatedValue,
    DataCategory,
    HealthRecord,
    MetricType,
    SessionCluster,
    SummaryCard,
    TimeRange,
)
from src.datasources.config_loader import DataSourcesConfig, get_datasources_config
from src.datasources.recent_summaries import RecentSummaryBuilder
from src.datasources.results import (
    Failed,
    InvalidMetricForOperation,
    StoreUnavailable,
    Success,
)

__all__ = [
    "AggregatedValue",
    "DataCategory",
    "HealthRecord",
    "MetricType",
    "SessionCluster",
    "SummaryCard",
    "TimeRange",
    "DataSourcesConfig",
    "get_datasources_config",
    "RecentSummaryBuilder",
    "Success",
    "Failed",
    "StoreUnavailable",
    "InvalidMetricForOperation",
]
