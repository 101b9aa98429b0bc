"""Distance from the buyer to one or many shops"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from apps.api.dependencies import get_caches
from apps.api.schemas.distance import (
    BatchDistanceRequest,
    BatchDistanceResponse,
    DistanceRequest,
    DistanceResult,
)
from apps.core.db import get_db
from apps.market.caching import MarketCaches
from apps.market.services.catalog import ShopNotFoundError
from apps.market.services.distance import create_distance_service
from apps.market.services.geo import InvalidCoordinatesError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["distance"])


@router.post("/distance", response_model=DistanceResult)
def distance_to_shop(body: DistanceRequest, db: Session = Depends(get_db), caches: MarketCaches = Depends(get_caches)):
    service = create_distance_service(db, caches)
    try:
        return service.distance_to_shop(body.user_latitude, body.user_longitude, body.shop_id)
    except InvalidCoordinatesError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ShopNotFoundError:
        raise HTTPException(status_code=404, detail="Shop not found")


@router.post("/distances", response_model=BatchDistanceResponse)
def distances_to_shops(
    body: BatchDistanceRequest,
    db: Session = Depends(get_db),
    caches: MarketCaches = Depends(get_caches),
):
    """One entry per requested shop, in request order; bad shops carry an inline error"""
    if not body.shop_ids:
        raise HTTPException(status_code=400, detail="shop_ids must be a non-empty array")

    service = create_distance_service(db, caches)
    try:
        distances = service.distances_to_shops(body.user_latitude, body.user_longitude, body.shop_ids)
    except InvalidCoordinatesError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return BatchDistanceResponse(distances=distances)
