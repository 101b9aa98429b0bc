"""Pydantic schemas for registration and login"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

MOBILE_PATTERN = r"^\d{10}$"


class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    mobile: str = Field(..., description="10-digit mobile number")
    password: str = Field(..., min_length=1)


class ShopkeeperRegister(UserRegister):
    shop_name: str = Field(..., min_length=1, max_length=120)
    category: Optional[str] = None
    village: Optional[str] = None
    city: Optional[str] = None
    # validated with the distance module so the error message matches the one shown to buyers
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    owner_photo: Optional[str] = Field(None, description="Photo URL")
    shop_photo: Optional[str] = Field(None, description="Photo URL")


class LoginRequest(BaseModel):
    mobile: str
    password: str


class AccountResponse(BaseModel):
    """Account record returned after registration or login"""
    id: int
    name: str
    mobile: str
    type: Literal["user", "shopkeeper"]
    profile_pic: Optional[str] = None
    shop_name: Optional[str] = None
    category: Optional[str] = None
    village: Optional[str] = None
    city: Optional[str] = None
    owner_photo: Optional[str] = None
    shop_photo: Optional[str] = None
