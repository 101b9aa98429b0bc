"""Registration and login"""

import logging
import re

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from apps.api.dependencies import get_caches
from apps.api.schemas.accounts import (
    MOBILE_PATTERN,
    AccountResponse,
    LoginRequest,
    ShopkeeperRegister,
    UserRegister,
)
from apps.core.db import get_db
from apps.core.security import get_password_hash, verify_password
from apps.market.caching import MarketCaches
from apps.market.models import Shopkeeper, User
from apps.market.services.geo import validate_coordinates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _check_mobile(db: Session, mobile: str) -> None:
    if not re.match(MOBILE_PATTERN, mobile or ""):
        raise HTTPException(status_code=400, detail="Please enter a valid 10-digit mobile number.")
    # one mobile number per account, across both account types
    taken = (
        db.query(User.id).filter(User.mobile == mobile).first()
        or db.query(Shopkeeper.id).filter(Shopkeeper.mobile == mobile).first()
    )
    if taken:
        raise HTTPException(status_code=400, detail="Mobile registered. Please login.")


def _user_account(user: User) -> AccountResponse:
    return AccountResponse(id=user.id, name=user.name, mobile=user.mobile, profile_pic=user.profile_pic, type="user")


def _shop_account(shop: Shopkeeper) -> AccountResponse:
    return AccountResponse(
        id=shop.id,
        name=shop.name,
        mobile=shop.mobile,
        shop_name=shop.shop_name,
        category=shop.category,
        village=shop.village,
        city=shop.city,
        owner_photo=shop.owner_photo,
        shop_photo=shop.shop_photo,
        type="shopkeeper",
    )


@router.post("/register/user", response_model=AccountResponse)
def register_user(body: UserRegister, db: Session = Depends(get_db)):
    """Register a buyer account"""
    _check_mobile(db, body.mobile)

    user = User(name=body.name, mobile=body.mobile, password_hash=get_password_hash(body.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return _user_account(user)


@router.post("/register/shopkeeper", response_model=AccountResponse)
def register_shopkeeper(
    body: ShopkeeperRegister,
    db: Session = Depends(get_db),
    caches: MarketCaches = Depends(get_caches),
):
    """Register a shop; its GPS location is mandatory"""
    _check_mobile(db, body.mobile)

    check = validate_coordinates(body.latitude, body.longitude)
    if not check.is_valid:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid or missing GPS location. Please enable location permissions. ({check.error})",
        )

    shop = Shopkeeper(
        name=body.name,
        mobile=body.mobile,
        password_hash=get_password_hash(body.password),
        village=body.village,
        city=body.city,
        shop_name=body.shop_name,
        category=body.category,
        latitude=body.latitude,
        longitude=body.longitude,
        owner_photo=body.owner_photo,
        shop_photo=body.shop_photo,
    )
    db.add(shop)
    db.commit()
    db.refresh(shop)

    caches.invalidate_shop_directory()
    logger.info("Registered shop %s (%s)", shop.id, shop.shop_name)
    return _shop_account(shop)


@router.post("/login", response_model=AccountResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Check credentials against buyers first, then shops"""
    user = db.query(User).filter(User.mobile == body.mobile).first()
    if user and verify_password(body.password, user.password_hash):
        return _user_account(user)

    shop = db.query(Shopkeeper).filter(Shopkeeper.mobile == body.mobile).first()
    if shop and verify_password(body.password, shop.password_hash):
        return _shop_account(shop)

    raise HTTPException(status_code=401, detail="Invalid credentials")
