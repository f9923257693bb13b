"""Keep only records contributed by prioritized sources."""

from __future__ import annotations

from typing import Iterable, Sequence

from src.datasources.base import HealthRecord, SourceId


def filter_priority_records(
    records: Iterable[HealthRecord], priority: Sequence[SourceId]
) -> list[HealthRecord]:
    """Return the records whose source is on ``priority``, in their original order.

    Pure and total: an empty priority list yields an empty result.
    """
    allowed = set(priority)
    if not allowed:
        return []
    return [r for r in records if r.source in allowed]
