"""Shop directory, shop detail, profile and reviews"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from apps.api.dependencies import get_caches
from apps.api.schemas.shop import (
    MessageResponse,
    ReviewCreate,
    ShopDetail,
    ShopProfileResponse,
    ShopProfileUpdate,
    ShopStatusUpdate,
    ShopSummary,
)
from apps.core.db import get_db
from apps.market.caching import MarketCaches
from apps.market.models import Review, Shopkeeper, User
from apps.market.services.catalog import ShopNotFoundError, create_catalog_service, shop_to_dict
from apps.market.services.geo import validate_coordinates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["shops"])


@router.get("/shopkeepers", response_model=List[ShopSummary])
def list_shopkeepers(db: Session = Depends(get_db), caches: MarketCaches = Depends(get_caches)):
    """All shops with a location (cached)"""
    return create_catalog_service(db, caches).list_shops()


@router.get("/shops/{shop_id}", response_model=ShopDetail)
def get_shop(shop_id: int, db: Session = Depends(get_db), caches: MarketCaches = Depends(get_caches)):
    """Shop with products, latest reviews and rating (cached)"""
    try:
        return create_catalog_service(db, caches).get_shop_detail(shop_id)
    except ShopNotFoundError:
        raise HTTPException(status_code=404, detail="Shop not found")


@router.post("/shop/profile", response_model=ShopProfileResponse)
def update_shop_profile(
    body: ShopProfileUpdate,
    db: Session = Depends(get_db),
    caches: MarketCaches = Depends(get_caches),
):
    """Update shop profile; location and photos change only when provided"""
    shop = db.query(Shopkeeper).filter(Shopkeeper.id == body.id).first()
    if not shop:
        raise HTTPException(status_code=404, detail="Shop not found")

    shop.name = body.name
    shop.shop_name = body.shop_name
    shop.category = body.category
    shop.opening_time = body.opening_time
    shop.closing_time = body.closing_time

    location_changed = False
    if body.latitude is not None and body.longitude is not None:
        check = validate_coordinates(body.latitude, body.longitude)
        if not check.is_valid:
            raise HTTPException(status_code=400, detail=check.error)
        location_changed = (shop.latitude, shop.longitude) != (body.latitude, body.longitude)
        shop.latitude = body.latitude
        shop.longitude = body.longitude

    if body.owner_photo:
        shop.owner_photo = body.owner_photo
    if body.shop_photo:
        shop.shop_photo = body.shop_photo

    db.commit()
    db.refresh(shop)

    caches.invalidate_shop_directory()
    caches.invalidate_shop_detail(shop.id)
    # offers carry the shop name
    caches.invalidate_offers()
    if location_changed:
        dropped = caches.invalidate_shop_distances(shop.id)
        logger.info("Shop %s moved; dropped %d cached distances", shop.id, dropped)

    return ShopProfileResponse(**shop_to_dict(shop))


@router.put("/shops/{shop_id}/status", response_model=MessageResponse)
def update_shop_status(
    shop_id: int,
    body: ShopStatusUpdate,
    db: Session = Depends(get_db),
    caches: MarketCaches = Depends(get_caches),
):
    shop = db.query(Shopkeeper).filter(Shopkeeper.id == shop_id).first()
    if not shop:
        raise HTTPException(status_code=404, detail="Shop not found")

    shop.is_open = body.is_open
    db.commit()

    caches.invalidate_shop_directory()
    caches.invalidate_shop_detail(shop_id)
    return MessageResponse(message="Updated", id=shop_id)


@router.post("/reviews", response_model=MessageResponse)
def add_review(body: ReviewCreate, db: Session = Depends(get_db), caches: MarketCaches = Depends(get_caches)):
    """One review per buyer and shop"""
    if not db.query(Shopkeeper.id).filter(Shopkeeper.id == body.shop_id).first():
        raise HTTPException(status_code=404, detail="Shop not found")
    if not db.query(User.id).filter(User.id == body.user_id).first():
        raise HTTPException(status_code=404, detail="User not found")

    existing = (
        db.query(Review.id)
        .filter(Review.shop_id == body.shop_id, Review.user_id == body.user_id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=400, detail="Already reviewed")

    review = Review(shop_id=body.shop_id, user_id=body.user_id, rating=body.rating, comment=body.comment)
    db.add(review)
    db.commit()

    caches.invalidate_shop_detail(body.shop_id)
    return MessageResponse(message="Review added", id=review.id)
