"""Cache-fronted reads: shop directory, special offers and per-shop detail bundles."""

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

from sqlalchemy.orm import Session

from apps.core.feature_flags import is_response_cache_enabled
from apps.market.caching import OFFERS_KEY, SHOP_DIRECTORY_KEY, MarketCaches, shop_detail_key
from apps.market.models import Product, Review, Shopkeeper, User

logger = logging.getLogger(__name__)

T = TypeVar("T")

OFFERS_LIMIT = 50
DETAIL_REVIEWS_LIMIT = 20


class ShopNotFoundError(LookupError):
    def __init__(self, shop_id: int):
        super().__init__(f"Shop {shop_id} not found")
        self.shop_id = shop_id


def shop_to_dict(shop: Shopkeeper) -> Dict[str, Any]:
    """Public shop fields (no credentials)."""
    return {
        "id": shop.id,
        "name": shop.name,
        "mobile": shop.mobile,
        "village": shop.village,
        "city": shop.city,
        "shop_name": shop.shop_name,
        "category": shop.category,
        "latitude": shop.latitude,
        "longitude": shop.longitude,
        "owner_photo": shop.owner_photo,
        "shop_photo": shop.shop_photo,
        "is_open": shop.is_open,
        "opening_time": shop.opening_time,
        "closing_time": shop.closing_time,
    }


def product_to_dict(product: Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "shop_id": product.shop_id,
        "name": product.name,
        "price": product.price,
        "image": product.image,
        "in_stock": product.in_stock,
        "is_best_seller": product.is_best_seller,
        "is_special_offer": product.is_special_offer,
        "offer_message": product.offer_message,
        "original_price": product.original_price,
    }


class CatalogService:
    """Read-mostly listings served through the response cache"""

    def __init__(self, db: Session, caches: MarketCaches):
        self.db = db
        self.caches = caches

    def _cached(self, key: str, fetch: Callable[[], T], ttl: int) -> T:
        if not is_response_cache_enabled():
            return fetch()
        return self.caches.responses.get_or_fetch(key, fetch, ttl)

    # --- Shop directory ---
    def list_shops(self) -> List[Dict[str, Any]]:
        return self._cached(SHOP_DIRECTORY_KEY, self._fetch_shops, self.caches.shops_ttl)

    def _fetch_shops(self) -> List[Dict[str, Any]]:
        shops = (
            self.db.query(Shopkeeper)
            .filter(Shopkeeper.latitude.isnot(None), Shopkeeper.longitude.isnot(None))
            .order_by(Shopkeeper.id.asc())
            .all()
        )
        return [
            {
                "id": s.id,
                "shop_name": s.shop_name,
                "category": s.category,
                "village": s.village,
                "city": s.city,
                "latitude": s.latitude,
                "longitude": s.longitude,
                "shop_photo": s.shop_photo,
                "is_open": s.is_open,
            }
            for s in shops
        ]

    # --- Special offers ---
    def list_offers(self) -> List[Dict[str, Any]]:
        return self._cached(OFFERS_KEY, self._fetch_offers, self.caches.offers_ttl)

    def _fetch_offers(self) -> List[Dict[str, Any]]:
        rows = (
            self.db.query(Product, Shopkeeper)
            .join(Shopkeeper, Product.shop_id == Shopkeeper.id)
            .filter(Product.is_special_offer.is_(True))
            .order_by(Product.price.asc(), Product.id.asc())
            .limit(OFFERS_LIMIT)
            .all()
        )
        return [
            {
                "id": p.id,
                "shop_id": p.shop_id,
                "name": p.name,
                "price": p.price,
                "image": p.image,
                "offer_message": p.offer_message,
                "original_price": p.original_price,
                "shop_name": s.shop_name,
                "village": s.village,
                "city": s.city,
            }
            for p, s in rows
        ]

    # --- Shop detail bundle ---
    def get_shop_detail(self, shop_id: int) -> Dict[str, Any]:
        """Shop, its products and latest reviews; raises ShopNotFoundError (never cached)."""
        return self._cached(shop_detail_key(shop_id), lambda: self._fetch_shop_detail(shop_id), self.caches.shop_detail_ttl)

    def _fetch_shop_detail(self, shop_id: int) -> Dict[str, Any]:
        shop = self.db.query(Shopkeeper).filter(Shopkeeper.id == shop_id).first()
        if shop is None:
            raise ShopNotFoundError(shop_id)

        products = (
            self.db.query(Product)
            .filter(Product.shop_id == shop_id)
            .order_by(Product.is_best_seller.desc(), Product.id.desc())
            .all()
        )
        reviews = (
            self.db.query(Review, User.name)
            .join(User, Review.user_id == User.id)
            .filter(Review.shop_id == shop_id)
            .order_by(Review.timestamp.desc(), Review.id.desc())
            .limit(DETAIL_REVIEWS_LIMIT)
            .all()
        )

        total_ratings = len(reviews)
        avg_rating = round(sum(r.rating for r, _ in reviews) / total_ratings, 1) if total_ratings else 0.0

        return {
            **shop_to_dict(shop),
            "products": [product_to_dict(p) for p in products],
            "reviews": [
                {
                    "id": r.id,
                    "rating": r.rating,
                    "comment": r.comment,
                    "timestamp": r.timestamp,
                    "user_name": user_name,
                }
                for r, user_name in reviews
            ],
            "avg_rating": avg_rating,
            "total_ratings": total_ratings,
        }


def create_catalog_service(db: Session, caches: MarketCaches) -> CatalogService:
    """Factory function to create CatalogService instance"""
    return CatalogService(db, caches)
