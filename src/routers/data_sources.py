"""Read-only endpoints for prioritized data-source summaries."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from src.datasources.base import DataCategory
from src.datasources.results import DataSourcesError, Failed, StoreUnavailable
from src.dependencies import PotentialSources, SummaryBuilder
from src.models.base import ErrorDetail
from src.models.data_sources import PotentialSourcesRead, SummaryCardRead

router = APIRouter(
    prefix="/data-sources",
    tags=["data-sources"],
    responses={500: {"model": ErrorDetail}, 503: {"model": ErrorDetail}},
)
logger = logging.getLogger("datasources.api")


def _raise_for_failure(error: DataSourcesError) -> None:
    if isinstance(error, StoreUnavailable):
        raise HTTPException(status_code=503, detail="Health data store unavailable")
    raise HTTPException(status_code=500, detail=str(error))


@router.get("/{category}/recent", response_model=list[SummaryCardRead])
async def recent_summaries(category: DataCategory, builder: SummaryBuilder) -> Any:
    result = await builder.build_summaries(category)
    if isinstance(result, Failed):
        logger.error("Recent summaries for %s failed: %s", category.value, result.error)
        _raise_for_failure(result.error)
    return [SummaryCardRead.from_card(card) for card in result.data]


@router.get("/{category}/potential-sources", response_model=PotentialSourcesRead)
async def potential_sources(category: DataCategory, loader: PotentialSources) -> Any:
    result = await loader.load(category)
    if isinstance(result, Failed):
        logger.error("Potential sources for %s failed: %s", category.value, result.error)
        _raise_for_failure(result.error)
    return PotentialSourcesRead(category=category, sources=result.data)
