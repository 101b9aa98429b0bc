import logging
import time
from urllib.parse import quote
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from apps.api.dependencies import get_caches
from apps.api.schemas.product import (
    OfferItem,
    ProductCreate,
    ProductResponse,
    ProductSearchResult,
    ProductUpdate,
)
from apps.api.schemas.shop import MessageResponse
from apps.core.db import get_db
from apps.core.feature_flags import is_search_debug_enabled
from apps.market.caching import MarketCaches
from apps.market.models import Product, Shopkeeper
from apps.market.services.catalog import create_catalog_service, product_to_dict
from apps.market.services.product_search import create_product_search_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["products"])


@router.get("/products", response_model=List[ProductSearchResult])
def search_products(
    response: Response,
    search: Optional[str] = Query(None, max_length=100, description="Search query; synonyms are expanded"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    db: Session = Depends(get_db),
):
    """Search products by product name, shop name or shop category"""
    start_time = time.time()
    service = create_product_search_service(db)

    results = service.search_products(search, page=page, limit=limit)
    response.headers["X-Total-Count"] = str(service.count_products(search))

    if is_search_debug_enabled():
        took = round((time.time() - start_time) * 1000, 2)
        response.headers["X-Search-Terms"] = quote(",".join(service.expand(search)), safe=",")
        response.headers["X-Search-Debug"] = f"query={quote(search or '')}, took={took}ms, results={len(results)}"

    return results


@router.get("/products/offers", response_model=List[OfferItem])
def list_offers(db: Session = Depends(get_db), caches: MarketCaches = Depends(get_caches)):
    """Special offers, cheapest first (cached)"""
    return create_catalog_service(db, caches).list_offers()


@router.post("/products", response_model=ProductResponse)
def add_product(body: ProductCreate, db: Session = Depends(get_db), caches: MarketCaches = Depends(get_caches)):
    if not db.query(Shopkeeper.id).filter(Shopkeeper.id == body.shop_id).first():
        raise HTTPException(status_code=404, detail="Shop not found")

    product = Product(**body.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)

    caches.invalidate_shop_detail(product.shop_id)
    if product.is_special_offer:
        caches.invalidate_offers()
    return product_to_dict(product)


@router.put("/products/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    body: ProductUpdate,
    db: Session = Depends(get_db),
    caches: MarketCaches = Depends(get_caches),
):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    was_offer = product.is_special_offer
    changes = body.model_dump()
    if changes.get("image") is None:
        # keep the current image unless a new one is sent
        changes.pop("image")
    for field, value in changes.items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)

    caches.invalidate_shop_detail(product.shop_id)
    if was_offer or product.is_special_offer:
        caches.invalidate_offers()
    return product_to_dict(product)


@router.delete("/products/{product_id}", response_model=MessageResponse)
def delete_product(product_id: int, db: Session = Depends(get_db), caches: MarketCaches = Depends(get_caches)):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    shop_id, was_offer = product.shop_id, product.is_special_offer
    db.delete(product)
    db.commit()

    caches.invalidate_shop_detail(shop_id)
    if was_offer:
        caches.invalidate_offers()
    return MessageResponse(message="Deleted", id=product_id)
