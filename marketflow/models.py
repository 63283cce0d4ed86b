# marketflow/models.py
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    # JSON form (fixtures, storage, HTTP) keeps the camelCase names
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


# ---------------------------
# Stored records
# ---------------------------
class Product(Record):
    id: int = Field(alias="Id")
    title: str = Field(min_length=1)
    description: str = ""
    price: float = Field(ge=0)
    category: str
    stock: int = Field(default=0, ge=0)
    images: List[str] = Field(min_length=1)
    seller_id: str
    created_at: datetime


class Category(Record):
    id: int = Field(alias="Id")
    name: str = Field(min_length=1)
    parent_id: Optional[int] = None


class OrderItem(Record):
    product_id: int
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)


class ShippingAddress(Record):
    name: str
    email: str = ""
    phone: Optional[str] = None
    address: str
    city: str
    state: str
    zip_code: str


class Order(Record):
    id: int = Field(alias="Id")
    items: List[OrderItem]
    total: float = Field(ge=0)
    status: OrderStatus = OrderStatus.pending
    shipping_address: ShippingAddress
    created_at: datetime
    reviewable: bool = False
    buyer_id: Optional[int] = None
    subtotal: Optional[float] = None
    shipping: Optional[float] = None
    tax: Optional[float] = None


class Review(Record):
    id: int = Field(alias="Id")
    product_id: int
    buyer_id: int
    rating: int = Field(ge=1, le=5)
    comment: str
    buyer_name: str = "Anonymous Buyer"
    buyer_email: str = ""
    created_at: datetime
    updated_at: datetime
    helpful: int = Field(default=0, ge=0)
    verified: bool = True


class CartItem(Record):
    product_id: int
    title: str
    price: float = Field(ge=0)
    image: str
    quantity: int = Field(ge=1)
    seller_id: str


class CartState(Record):
    items: List[CartItem] = Field(default_factory=list)
    # UI visibility flag, never persisted
    is_open: bool = False


# ---------------------------
# Request payloads
# ---------------------------
class ProductIn(Record):
    title: str
    description: str = ""
    price: float
    category: str
    stock: int = 0
    images: List[str]
    seller_id: str


class ProductUpdate(Record):
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    stock: Optional[int] = None
    images: Optional[List[str]] = None
    seller_id: Optional[str] = None


class CategoryIn(Record):
    name: str
    parent_id: Optional[int] = None


class CategoryUpdate(Record):
    name: Optional[str] = None
    parent_id: Optional[int] = None


class OrderIn(Record):
    items: List[OrderItem]
    total: float
    status: OrderStatus = OrderStatus.pending
    shipping_address: ShippingAddress
    buyer_id: Optional[int] = None
    subtotal: Optional[float] = None
    shipping: Optional[float] = None
    tax: Optional[float] = None


class OrderUpdate(Record):
    items: Optional[List[OrderItem]] = None
    total: Optional[float] = None
    status: Optional[OrderStatus] = None
    shipping_address: Optional[ShippingAddress] = None
    buyer_id: Optional[int] = None


class StatusUpdate(Record):
    status: str


# review payloads stay loose so the service reports rating/comment problems itself
class ReviewIn(Record):
    product_id: Optional[int] = None
    buyer_id: Optional[int] = None
    rating: Optional[int] = None
    comment: Optional[str] = None
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None


class ReviewUpdate(Record):
    rating: Optional[int] = None
    comment: Optional[str] = None
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None


# ---------------------------
# Aggregates
# ---------------------------
class ProductStats(Record):
    total_reviews: int
    average_rating: float
    rating_distribution: Dict[int, int]


class ProductRating(Record):
    average: float
    count: int
