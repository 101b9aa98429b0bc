"""Buyer-to-shop distances, memoized per (shop, viewer location)."""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from apps.market.caching import MarketCaches, distance_key
from apps.market.models import Shopkeeper
from apps.market.services.catalog import ShopNotFoundError
from apps.market.services.geo import (
    InvalidCoordinatesError,
    calculate_distance,
    format_distance,
    validate_coordinates,
)

logger = logging.getLogger(__name__)

LOCATION_UNAVAILABLE = "Location unavailable"


def _ensure_origin(lat: Any, lon: Any) -> None:
    check = validate_coordinates(lat, lon)
    if not check.is_valid:
        raise InvalidCoordinatesError(check.error)


def _unavailable(shop_id: int, shop_name: Optional[str], error: str) -> Dict[str, Any]:
    return {
        "shop_id": shop_id,
        "shop_name": shop_name,
        "distance_km": None,
        "formatted": LOCATION_UNAVAILABLE,
        "error": error,
    }


class DistanceService:
    """Computes distances from one origin to shops, reading and filling the distance cache."""

    def __init__(self, db: Session, caches: MarketCaches):
        self.db = db
        self.cache = caches.distances

    def _measure(self, shop: Shopkeeper, lat: float, lon: float) -> Dict[str, Any]:
        """Distance entry for ``shop``; invalid shop coordinates give an error entry."""
        check = validate_coordinates(shop.latitude, shop.longitude)
        if not check.is_valid:
            return _unavailable(shop.id, shop.shop_name, check.error)
        distance_km = calculate_distance(lat, lon, float(shop.latitude), float(shop.longitude))
        return {
            "shop_id": shop.id,
            "shop_name": shop.shop_name,
            "distance_km": distance_km,
            "formatted": format_distance(distance_km),
            "error": None,
        }

    def distance_to_shop(self, user_lat: Any, user_lon: Any, shop_id: int) -> Dict[str, Any]:
        """Distance to one shop.

        Raises InvalidCoordinatesError for a bad origin or bad shop location and
        ShopNotFoundError for an unknown shop.
        """
        _ensure_origin(user_lat, user_lon)
        lat, lon = float(user_lat), float(user_lon)

        key = distance_key(shop_id, lat, lon)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        shop = self.db.query(Shopkeeper).filter(Shopkeeper.id == shop_id).first()
        if shop is None:
            raise ShopNotFoundError(shop_id)

        result = self._measure(shop, lat, lon)
        if result["error"]:
            raise InvalidCoordinatesError(f"Shop has invalid location data: {result['error']}")
        self.cache.set(key, result)
        return result

    def distances_to_shops(self, user_lat: Any, user_lon: Any, shop_ids: Iterable[int]) -> List[Dict[str, Any]]:
        """One entry per requested id, in request order.

        Only ids missing from the cache are fetched, in a single query. Shops
        with unusable coordinates or unknown ids get an inline error instead
        of failing the batch.
        """
        _ensure_origin(user_lat, user_lon)
        lat, lon = float(user_lat), float(user_lon)
        shop_ids = [int(shop_id) for shop_id in shop_ids]
        if not shop_ids:
            raise ValueError("shop_ids must be a non-empty list")

        resolved: Dict[int, Dict[str, Any]] = {}
        missing: List[int] = []
        for shop_id in shop_ids:
            if shop_id in resolved or shop_id in missing:
                continue
            cached = self.cache.get(distance_key(shop_id, lat, lon))
            if cached is not None:
                resolved[shop_id] = cached
            else:
                missing.append(shop_id)

        if missing:
            shops = self.db.query(Shopkeeper).filter(Shopkeeper.id.in_(missing)).all()
            for shop in shops:
                result = self._measure(shop, lat, lon)
                if result["error"] is None:
                    self.cache.set(distance_key(shop.id, lat, lon), result)
                resolved[shop.id] = result
            logger.debug("Distance batch: %d cached, %d fetched", len(resolved) - len(shops), len(shops))

        return [resolved.get(shop_id) or _unavailable(shop_id, None, "Shop not found") for shop_id in shop_ids]


def create_distance_service(db: Session, caches: MarketCaches) -> DistanceService:
    """Factory function to create DistanceService instance"""
    return DistanceService(db, caches)
