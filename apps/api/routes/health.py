"""Health check endpoints exposed by the public API."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import yaml
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from apps.api.dependencies import get_caches
from apps.core.db import get_db
from apps.core.feature_flags import get_feature_flags
from apps.market.caching import MarketCaches
from apps.market.services.synonyms import get_synonyms_health

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("", summary="Constant-time readiness probe")
def health_fast() -> dict[str, str]:
    """Simple readiness probe that avoids touching the database."""
    return {"status": "ok", "timestamp": _utc_timestamp()}


@router.get("/db", summary="Database connectivity check")
def health_db(db: Session = Depends(get_db)) -> dict[str, str]:
    """Deep health check that validates the database connection."""
    db.execute(text("SELECT 1"))
    return {"status": "ok", "scope": "db", "timestamp": _utc_timestamp()}


@router.get("/cache", summary="Response and distance cache statistics")
def health_cache(caches: MarketCaches = Depends(get_caches)) -> dict[str, object]:
    return {"status": "ok", "caches": caches.stats(), "timestamp": _utc_timestamp()}


@router.get("/synonyms", summary="Synonym dictionary status")
def synonyms_health_check() -> dict[str, object]:
    try:
        metrics = get_synonyms_health()
    except (OSError, ValueError, yaml.YAMLError) as exc:
        logger.error("Synonyms health check failed: %s", exc)
        return {
            "status": "unhealthy",
            "error": str(exc),
            "timestamp": _utc_timestamp(),
        }
    return {
        "status": "healthy" if metrics["is_healthy"] else "unhealthy",
        "metrics": metrics,
        "timestamp": _utc_timestamp(),
    }


@router.get("/feature-flags", summary="Feature flag snapshot")
def health_feature_flags() -> dict[str, object]:
    return {
        "ok": True,
        "flags": get_feature_flags().get_all_flags(),
        "timestamp": _utc_timestamp(),
    }
