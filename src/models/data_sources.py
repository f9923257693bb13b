"""Pydantic models for data-source summary responses."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import Field

from src.datasources.base import DataCategory, MetricType, SummaryCard
from src.models.base import ApiBase


class AggregatedValueRead(ApiBase):
    value: float
    unit: str
    sources: list[str] = Field(default_factory=list)


class SummaryCardRead(ApiBase):
    metric_type: MetricType
    aggregated_value: AggregatedValueRead
    start_date: date
    end_date: date
    start_time: datetime
    end_time: datetime

    @classmethod
    def from_card(cls, card: SummaryCard) -> SummaryCardRead:
        return cls(
            metric_type=card.metric_type,
            aggregated_value=AggregatedValueRead.model_validate(card.aggregated_value),
            start_date=card.start_date,
            end_date=card.end_date,
            start_time=card.time_range.start,
            end_time=card.time_range.end,
        )


class PotentialSourcesRead(ApiBase):
    category: DataCategory
    sources: list[str]
