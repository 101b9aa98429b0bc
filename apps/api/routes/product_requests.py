"""Product requests: a buyer asks, nearby shops answer yes or no"""

import logging
from datetime import timedelta
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from apps.api.schemas.conversation import (
    ArchiveUpdate,
    PendingRequest,
    ProductRequestCreate,
    RequestReply,
    UserResponseItem,
)
from apps.api.schemas.shop import MessageResponse
from apps.core.config import settings
from apps.core.db import get_db
from apps.market.models import ProductRequest, RequestResponse, Shopkeeper, User, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["requests"])

NO_RESPONSE = "NO"


@router.post("/requests", response_model=MessageResponse)
def create_request(body: ProductRequestCreate, db: Session = Depends(get_db)):
    if not db.query(User.id).filter(User.id == body.user_id).first():
        raise HTTPException(status_code=404, detail="User not found")

    request = ProductRequest(**body.model_dump())
    db.add(request)
    db.commit()
    logger.info("Product request %s from user %s: %s", request.id, request.user_id, request.product_name)
    return MessageResponse(message="Request sent", id=request.id)


@router.get("/shop/requests", response_model=List[PendingRequest])
def list_pending_requests(
    shop_id: int = Query(..., description="Shop asking for open requests"),
    db: Session = Depends(get_db),
):
    """Recent pending requests this shop has not answered yet, newest first"""
    since = utcnow() - timedelta(hours=settings.request_window_hours)
    answered = select(RequestResponse.request_id).where(RequestResponse.shop_id == shop_id)

    rows = (
        db.query(ProductRequest, User.name)
        .join(User, User.id == ProductRequest.user_id)
        .filter(
            ProductRequest.status == "pending",
            ProductRequest.timestamp > since,
            ~ProductRequest.id.in_(answered),
        )
        .order_by(ProductRequest.timestamp.desc(), ProductRequest.id.desc())
        .all()
    )
    return [
        PendingRequest(
            id=req.id,
            user_id=req.user_id,
            user_name=user_name,
            product_name=req.product_name,
            latitude=req.latitude,
            longitude=req.longitude,
            status=req.status,
            timestamp=req.timestamp,
        )
        for req, user_name in rows
    ]


@router.post("/requests/{request_id}/respond", response_model=MessageResponse)
def respond_to_request(request_id: int, body: RequestReply, db: Session = Depends(get_db)):
    request = db.query(ProductRequest).filter(ProductRequest.id == request_id).first()
    if not request:
        raise HTTPException(status_code=404, detail="Request not found")
    if not db.query(Shopkeeper.id).filter(Shopkeeper.id == body.shop_id).first():
        raise HTTPException(status_code=404, detail="Shop not found")

    if body.response_type == "no":
        product_name, price, image = NO_RESPONSE, 0, None
    else:
        product_name = body.product_name or request.product_name
        price, image = body.price, body.image

    reply = RequestResponse(
        request_id=request_id,
        shop_id=body.shop_id,
        product_name=product_name,
        price=price,
        image=image,
        note=body.note,
    )
    db.add(reply)
    db.commit()
    return MessageResponse(message="Response sent", id=reply.id)


@router.get("/user/responses", response_model=List[UserResponseItem])
def list_user_responses(
    user_id: int = Query(..., description="Buyer who made the requests"),
    db: Session = Depends(get_db),
):
    """Shop replies to this buyer's requests that are not archived"""
    rows = (
        db.query(RequestResponse, Shopkeeper)
        .join(ProductRequest, ProductRequest.id == RequestResponse.request_id)
        .join(Shopkeeper, Shopkeeper.id == RequestResponse.shop_id)
        .filter(ProductRequest.user_id == user_id, RequestResponse.is_archived.is_(False))
        .order_by(RequestResponse.timestamp.desc(), RequestResponse.id.desc())
        .all()
    )
    return [
        UserResponseItem(
            id=reply.id,
            request_id=reply.request_id,
            shop_id=reply.shop_id,
            product_name=reply.product_name,
            price=reply.price,
            image=reply.image,
            note=reply.note,
            is_archived=reply.is_archived,
            timestamp=reply.timestamp,
            shop_name=shop.shop_name,
            village=shop.village,
            city=shop.city,
            latitude=shop.latitude,
            longitude=shop.longitude,
            owner_photo=shop.owner_photo,
        )
        for reply, shop in rows
    ]


@router.put("/responses/{response_id}/archive", response_model=MessageResponse)
def archive_response(response_id: int, body: ArchiveUpdate, db: Session = Depends(get_db)):
    reply = db.query(RequestResponse).filter(RequestResponse.id == response_id).first()
    if not reply:
        raise HTTPException(status_code=404, detail="Response not found")
    reply.is_archived = body.is_archived
    db.commit()
    return MessageResponse(message="Archived" if body.is_archived else "Restored", id=response_id)
