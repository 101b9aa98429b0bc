"""In-app chat between buyers and shops"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from apps.api.schemas.conversation import ChatPartner, MessageCreate, MessageCreated, MessageItem
from apps.core.db import get_db
from apps.market.models import Message, User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.get("/shop/chats/{shop_id}", response_model=List[ChatPartner])
def list_shop_chats(shop_id: int, db: Session = Depends(get_db)):
    """Buyers with a conversation the shop has not hidden"""
    users = (
        db.query(User.id, User.name)
        .join(Message, or_(
            and_(Message.sender_id == User.id, Message.sender_type == "user", Message.receiver_id == shop_id),
            and_(Message.receiver_id == User.id, Message.sender_type == "shopkeeper", Message.sender_id == shop_id),
        ))
        .filter(Message.hidden_for_shopkeeper.is_(False))
        .distinct()
        .order_by(User.id.asc())
        .all()
    )
    return [ChatPartner(id=u.id, name=u.name) for u in users]


@router.get("/messages", response_model=List[MessageItem])
def get_conversation(
    user_id: int = Query(..., description="Buyer id"),
    shop_id: int = Query(..., description="Shop id"),
    db: Session = Depends(get_db),
):
    """Conversation between one buyer and one shop, oldest first"""
    return (
        db.query(Message)
        .filter(or_(
            and_(Message.sender_type == "user", Message.sender_id == user_id, Message.receiver_id == shop_id),
            and_(Message.sender_type == "shopkeeper", Message.sender_id == shop_id, Message.receiver_id == user_id),
        ))
        .order_by(Message.timestamp.asc(), Message.id.asc())
        .all()
    )


@router.post("/messages", response_model=MessageCreated)
def send_message(body: MessageCreate, db: Session = Depends(get_db)):
    message = Message(**body.model_dump())
    db.add(message)
    db.commit()
    db.refresh(message)
    logger.debug("Message %s from %s %s", message.id, message.sender_type, message.sender_id)
    return MessageCreated(id=message.id, sender_type=message.sender_type, timestamp=message.timestamp)
