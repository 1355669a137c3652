"""System status and landing page statistics endpoints."""

from __future__ import annotations

import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from loadout_hub.api.v1.dependencies import SessionDep
from loadout_hub.core.settings import settings
from loadout_hub.schemas.stats import SiteStats
from loadout_hub.services.stats import get_site_stats

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/stats", response_model=SiteStats)
async def get_stats(db: SessionDep) -> SiteStats:
    """Landing page totals; zeros when the store is unavailable."""
    return get_site_stats(db)


@router.get("/health")
async def get_system_health(db: SessionDep) -> dict[str, object]:
    """Health check including database connectivity.

    Args:
        db: Database session

    Returns:
        Dictionary with overall status, component health and version
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {e}"

    return {
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "timestamp": int(time.time()),
        "components": {"database": db_status},
        "version": settings.app_version,
    }
