#!/usr/bin/env python3
"""Product search over product name, shop name and shop category"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from apps.core.feature_flags import is_synonym_search_enabled
from apps.market.models import Product, Shopkeeper
from apps.market.services.term_expansion import TermExpander, create_term_expander

logger = logging.getLogger(__name__)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ProductSearchService:
    """Synonym-aware substring search with offset pagination"""

    def __init__(self, db: Session, expander: Optional[TermExpander] = None):
        self.db = db
        self.expander = expander or create_term_expander()

    def expand(self, search: Optional[str]) -> List[str]:
        return self.expander.expand(search, use_synonyms=is_synonym_search_enabled())

    def _base_query(self, terms: List[str]) -> Query:
        query = self.db.query(Product, Shopkeeper).join(Shopkeeper, Product.shop_id == Shopkeeper.id)
        if terms:
            # one (name OR shop_name OR category) clause per term
            conditions = []
            for term in terms:
                pattern = _like_pattern(term)
                conditions.append(or_(
                    Product.name.ilike(pattern, escape="\\"),
                    Shopkeeper.shop_name.ilike(pattern, escape="\\"),
                    Shopkeeper.category.ilike(pattern, escape="\\"),
                ))
            query = query.filter(or_(*conditions))
        return query

    def search_products(self, search: Optional[str] = None, page: int = 1, limit: int = 20) -> List[Dict[str, Any]]:
        """Return one page of products matching ``search`` (all products when empty)."""
        if page < 1:
            raise ValueError("page must be >= 1")
        if limit < 1:
            raise ValueError("limit must be > 0")

        terms = self.expand(search)
        if terms:
            logger.debug("Product search '%s' expanded to %s", search, terms)

        offset = (page - 1) * limit
        rows = (
            self._base_query(terms)
            .order_by(Product.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [self._row_to_dict(product, shop) for product, shop in rows]

    def count_products(self, search: Optional[str] = None) -> int:
        return self._base_query(self.expand(search)).count()

    @staticmethod
    def _row_to_dict(product: Product, shop: Shopkeeper) -> Dict[str, Any]:
        return {
            "id": product.id,
            "shop_id": product.shop_id,
            "name": product.name,
            "price": product.price,
            "image": product.image,
            "is_best_seller": product.is_best_seller,
            "is_special_offer": product.is_special_offer,
            "offer_message": product.offer_message,
            "original_price": product.original_price,
            "shop_name": shop.shop_name,
            "shop_category": shop.category,
            "village": shop.village,
            "city": shop.city,
            "latitude": shop.latitude,
            "longitude": shop.longitude,
        }


def create_product_search_service(db: Session) -> ProductSearchService:
    """Factory function to create ProductSearchService instance"""
    return ProductSearchService(db)
