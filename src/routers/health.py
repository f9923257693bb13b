"""Liveness endpoint, reporting the store connection and the active summary config."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from src.config import get_settings
from src.datasources.config_loader import get_datasources_config
from src.services.database import fetchval

router = APIRouter(tags=["system"])
logger = logging.getLogger("datasources.health")


@router.get("/health")
async def health_check() -> dict:
    """Return 200 while the process is up; ``status`` degrades if the store is unreachable."""
    settings = get_settings()
    config = get_datasources_config()

    try:
        store_ok = await fetchval("SELECT 1") == 1
    except Exception as exc:
        logger.warning("Health data store probe failed: %s", exc)
        store_ok = False

    return {
        "status": "healthy" if store_ok else "degraded",
        "version": settings.app_version,
        "store": "connected" if store_ok else "unreachable",
        "local_timezone": settings.local_timezone,
        "config_version": config.version,
        "lookback_days": config.lookback_days,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
