"""Pydantic schemas for products, search and offers"""

from typing import Optional

from pydantic import BaseModel, Field


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: float = Field(..., ge=0)
    image: Optional[str] = Field(None, description="Image URL")
    in_stock: bool = True
    is_best_seller: bool = False
    is_special_offer: bool = False
    offer_message: Optional[str] = None
    original_price: Optional[float] = Field(None, ge=0)


class ProductCreate(ProductBase):
    shop_id: int


class ProductUpdate(ProductBase):
    pass


class ProductResponse(ProductBase):
    id: int
    shop_id: int


class ProductSearchResult(BaseModel):
    """Product row joined with its shop"""
    id: int
    shop_id: int
    name: str
    price: float
    image: Optional[str] = None
    is_best_seller: bool
    is_special_offer: bool
    offer_message: Optional[str] = None
    original_price: Optional[float] = None
    shop_name: Optional[str] = None
    shop_category: Optional[str] = None
    village: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class OfferItem(BaseModel):
    id: int
    shop_id: int
    name: str
    price: float
    image: Optional[str] = None
    offer_message: Optional[str] = None
    original_price: Optional[float] = None
    shop_name: Optional[str] = None
    village: Optional[str] = None
    city: Optional[str] = None
