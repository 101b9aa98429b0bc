"""Pydantic schemas for chat and the product-request workflow"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    sender_type: Literal["user", "shopkeeper"]
    sender_id: int
    receiver_id: int
    content: str = Field(..., min_length=1, max_length=2000)


class MessageItem(BaseModel):
    id: int
    sender_type: str
    sender_id: int
    receiver_id: int
    content: str
    timestamp: datetime

    class Config:
        from_attributes = True


class MessageCreated(BaseModel):
    id: int
    sender_type: str
    timestamp: datetime


class ChatPartner(BaseModel):
    id: int
    name: str


class ProductRequestCreate(BaseModel):
    user_id: int
    product_name: str = Field(..., min_length=1, max_length=200)
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class PendingRequest(BaseModel):
    id: int
    user_id: int
    user_name: str
    product_name: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: str
    timestamp: datetime


class RequestReply(BaseModel):
    shop_id: int
    response_type: Literal["yes", "no"] = "yes"
    product_name: Optional[str] = None
    price: float = Field(0, ge=0)
    note: Optional[str] = None
    image: Optional[str] = Field(None, description="Image URL")


class UserResponseItem(BaseModel):
    """A shop's reply as shown to the buyer who asked"""
    id: int
    request_id: int
    shop_id: int
    product_name: str
    price: float
    image: Optional[str] = None
    note: Optional[str] = None
    is_archived: bool
    timestamp: datetime
    shop_name: Optional[str] = None
    village: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    owner_photo: Optional[str] = None


class ArchiveUpdate(BaseModel):
    is_archived: bool
