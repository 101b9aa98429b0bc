from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from apps.api.schemas.product import ProductResponse


class ShopSummary(BaseModel):
    """Directory card; only what the dashboard renders"""
    id: int
    shop_name: Optional[str] = None
    category: Optional[str] = None
    village: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    shop_photo: Optional[str] = None
    is_open: bool = True


class ShopBase(BaseModel):
    id: int
    name: str
    mobile: str
    village: Optional[str] = None
    city: Optional[str] = None
    shop_name: Optional[str] = None
    category: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    owner_photo: Optional[str] = None
    shop_photo: Optional[str] = None
    is_open: bool = True
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None


class ReviewItem(BaseModel):
    id: int
    rating: int
    comment: Optional[str] = None
    timestamp: datetime
    user_name: str


class ShopDetail(ShopBase):
    products: List[ProductResponse]
    reviews: List[ReviewItem]
    avg_rating: float
    total_ratings: int


class ShopProfileUpdate(BaseModel):
    id: int
    name: str = Field(..., min_length=1)
    shop_name: str = Field(..., min_length=1)
    category: Optional[str] = None
    opening_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    closing_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    owner_photo: Optional[str] = None
    shop_photo: Optional[str] = None


class ShopProfileResponse(ShopBase):
    type: str = "shopkeeper"


class ShopStatusUpdate(BaseModel):
    is_open: bool


class ReviewCreate(BaseModel):
    shop_id: int
    user_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)


class MessageResponse(BaseModel):
    """Plain acknowledgement for writes"""
    message: str
    id: Optional[int] = None
