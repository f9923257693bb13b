"""Base classes and canonical data models for priority data-source summaries.

Every collaborator (health data store, priority list provider, aggregator)
is expressed as an ABC here so the resolvers only ever see these types.
The concrete in-memory and Postgres implementations live in ``stores/``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum

logger = logging.getLogger("datasources")

SourceId = str
PriorityList = list[SourceId]


# ---------------------------------------------------------------------------
# Metric types and categories
# ---------------------------------------------------------------------------


class DataCategory(str, Enum):
    """Coarse grouping used to scope a priority list."""

    ACTIVITY = "activity"
    SLEEP = "sleep"
    VITALS = "vitals"


class MetricType(str, Enum):
    """Health metric identifier."""

    STEPS = "steps"
    DISTANCE = "distance"
    TOTAL_CALORIES_BURNED = "total_calories_burned"
    SLEEP = "sleep"
    HEART_RATE = "heart_rate"
    RESTING_HEART_RATE = "resting_heart_rate"

    @property
    def category(self) -> DataCategory:
        return _METRIC_CATEGORIES[self]

    @property
    def is_session(self) -> bool:
        """True for metrics recorded as [start, end) sessions."""
        return self in _SESSION_METRICS


_METRIC_CATEGORIES: dict[MetricType, DataCategory] = {
    MetricType.STEPS: DataCategory.ACTIVITY,
    MetricType.DISTANCE: DataCategory.ACTIVITY,
    MetricType.TOTAL_CALORIES_BURNED: DataCategory.ACTIVITY,
    MetricType.SLEEP: DataCategory.SLEEP,
    MetricType.HEART_RATE: DataCategory.VITALS,
    MetricType.RESTING_HEART_RATE: DataCategory.VITALS,
}

_SESSION_METRICS = frozenset({MetricType.SLEEP})


def metrics_in_category(category: DataCategory) -> list[MetricType]:
    """Return every metric type belonging to ``category`` in declaration order."""
    return [m for m in MetricType if m.category is category]


# ---------------------------------------------------------------------------
# Local calendar helpers
# ---------------------------------------------------------------------------


def start_of_day(day: date, tz: tzinfo) -> datetime:
    """Return local midnight of ``day`` as an aware datetime."""
    return datetime.combine(day, time.min, tzinfo=tz)


def local_date(ts: datetime, tz: tzinfo) -> date:
    """Return the calendar date of ``ts`` in the zone ``tz``."""
    return ts.astimezone(tz).date()


# ---------------------------------------------------------------------------
# Canonical models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimeRange:
    """Half-open interval ``[start, end)`` of aware datetimes."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"TimeRange end {self.end} is before start {self.start}")

    @classmethod
    def for_day(cls, day: date, tz: tzinfo) -> TimeRange:
        """The local calendar day ``day`` in zone ``tz``."""
        return cls(start_of_day(day, tz), start_of_day(day + timedelta(days=1), tz))

    def contains(self, ts: datetime) -> bool:
        return self.start <= ts < self.end


@dataclass(frozen=True)
class HealthRecord:
    """One data point read from the health data store.

    Attributes:
        source:      Identifier of the contributing app or device.
        metric_type: Metric this record belongs to.
        start_time:  Aware start timestamp.
        end_time:    Aware end timestamp, None for instantaneous records.
        value:       Numeric payload (count, metres, kcal, bpm), None for sessions.
    """

    source: SourceId
    metric_type: MetricType
    start_time: datetime
    end_time: datetime | None = None
    value: float | None = None

    def __post_init__(self) -> None:
        if self.end_time is not None and self.end_time < self.start_time:
            raise ValueError(
                f"HealthRecord from {self.source!r} ends ({self.end_time}) "
                f"before it starts ({self.start_time})"
            )

    @property
    def effective_end(self) -> datetime:
        """End time, or start time for instantaneous records."""
        return self.end_time if self.end_time is not None else self.start_time


@dataclass(frozen=True)
class SessionCluster:
    """Merged display interval for the sessions touching a date."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError(f"SessionCluster end {self.end} must be after start {self.start}")

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(self.start, self.end)


@dataclass(frozen=True)
class AggregatedValue:
    """Aggregated metric value as produced by an Aggregator."""

    value: float
    unit: str
    sources: list[SourceId] = field(default_factory=list)


@dataclass(frozen=True)
class SummaryCard:
    """Most recent prioritized aggregate for one metric type.

    Attributes:
        metric_type:      Metric summarised.
        aggregated_value: Opaque value produced by the aggregator.
        start_date:       First local date covered.
        end_date:         Last local date covered (== start_date for non-session metrics).
        time_range:       Exact interval that was aggregated.
    """

    metric_type: MetricType
    aggregated_value: AggregatedValue
    start_date: date
    end_date: date
    time_range: TimeRange


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------


class HealthDataStore(ABC):
    """Read-only query surface of the health data store."""

    @abstractmethod
    async def list_activity_dates(
        self, metric_type: MetricType, time_range: TimeRange
    ) -> list[date]:
        """Return the local dates in ``time_range`` having any record of ``metric_type``.

        Dates from every source are included.  Implementations may return
        dates outside the range; callers filter again.
        """

    @abstractmethod
    async def read_records(
        self,
        metric_type: MetricType,
        time_range: TimeRange,
        source: SourceId | None = None,
    ) -> list[HealthRecord]:
        """Return records of ``metric_type`` whose start_time lies in ``time_range``.

        Args:
            metric_type: Metric to read.
            time_range:  Half-open interval matched against start_time.
            source:      Restrict to one source; None reads every source.
        """

    @abstractmethod
    async def list_contributing_sources(self, category: DataCategory) -> set[SourceId]:
        """Return every source holding at least one record in ``category``."""


class PriorityListProvider(ABC):
    """Supplies the user-ranked sources for a data category."""

    @abstractmethod
    async def get_priority_list(self, category: DataCategory) -> PriorityList:
        """Return the ordered, de-duplicated priority list for ``category``."""


class WriteAccessReader(ABC):
    """Lists sources allowed to write data of a category."""

    @abstractmethod
    async def sources_with_write_access(self, category: DataCategory) -> set[SourceId]:
        """Return sources holding at least one write grant in ``category``."""


class Aggregator(ABC):
    """Turns the records of a metric over an interval into one display value."""

    @abstractmethod
    async def aggregate(
        self, metric_type: MetricType, time_range: TimeRange
    ) -> AggregatedValue:
        """Aggregate ``metric_type`` over ``time_range``."""
