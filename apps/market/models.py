from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from apps.core.db import Base


def utcnow() -> datetime:
    """Naive UTC timestamp; both SQLite and PostgreSQL columns store it as-is."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """Buyer account"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    mobile = Column(String(10), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    profile_pic = Column(Text, nullable=True)


class Shopkeeper(Base):
    """Shop owner account; one shop per account"""
    __tablename__ = "shopkeepers"
    __table_args__ = (
        Index("idx_shops_location", "latitude", "longitude"),
        Index("idx_shops_search", "shop_name", "category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    mobile = Column(String(10), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)

    village = Column(Text)
    city = Column(Text, index=True)
    shop_name = Column(Text)
    category = Column(Text, index=True)

    # Координаты магазина; (0, 0) означает "не задано"
    latitude = Column(Float, CheckConstraint('latitude IS NULL OR (latitude >= -90 AND latitude <= 90)'))
    longitude = Column(Float, CheckConstraint('longitude IS NULL OR (longitude >= -180 AND longitude <= 180)'))

    owner_photo = Column(Text, nullable=True)  # URL, файлы хранятся вне сервиса
    shop_photo = Column(Text, nullable=True)
    is_open = Column(Boolean, default=True, nullable=False)
    opening_time = Column(String(5), nullable=True)  # HH:MM
    closing_time = Column(String(5), nullable=True)

    products = relationship("Product", back_populates="shop", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="shop", cascade="all, delete-orphan")


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        Index("idx_products_shop_sort", "shop_id", "is_best_seller", "id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shopkeepers.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False, index=True)
    price = Column(Float, nullable=False)
    image = Column(Text, nullable=True)
    in_stock = Column(Boolean, default=True, nullable=False)
    is_best_seller = Column(Boolean, default=False, nullable=False, index=True)
    is_special_offer = Column(Boolean, default=False, nullable=False, index=True)
    offer_message = Column(Text, nullable=True)
    original_price = Column(Float, nullable=True)

    shop = relationship("Shopkeeper", back_populates="products")


class Message(Base):
    """Chat message between a buyer and a shop"""
    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_messages_conversation", "sender_id", "receiver_id", "sender_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    sender_type = Column(String(16), nullable=False)  # user | shopkeeper
    sender_id = Column(Integer, nullable=False)
    receiver_id = Column(Integer, nullable=False, index=True)
    content = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)
    hidden_for_shopkeeper = Column(Boolean, default=False, nullable=False)
    hidden_for_user = Column(Boolean, default=False, nullable=False)


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("shop_id", "user_id", name="uq_reviews_shop_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating"),
    )

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shopkeepers.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)

    shop = relationship("Shopkeeper", back_populates="reviews")
    user = relationship("User")


class ProductRequest(Base):
    """A buyer asking nearby shops for a product"""
    __tablename__ = "product_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_name = Column(Text, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    status = Column(String(16), default="pending", nullable=False, index=True)  # pending | closed
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)

    user = relationship("User")
    responses = relationship("RequestResponse", back_populates="request", cascade="all, delete-orphan")


class RequestResponse(Base):
    """A shop's answer to a product request"""
    __tablename__ = "request_responses"

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("product_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    shop_id = Column(Integer, ForeignKey("shopkeepers.id", ondelete="CASCADE"), nullable=False, index=True)
    product_name = Column(Text, nullable=False)  # "NO" when the shop does not have it
    price = Column(Float, nullable=False, default=0)
    image = Column(Text, nullable=True)
    note = Column(Text, nullable=True)
    is_archived = Column(Boolean, default=False, nullable=False, index=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)

    request = relationship("ProductRequest", back_populates="responses")
    shop = relationship("Shopkeeper")
