# marketflow/services/__init__.py
from dataclasses import dataclass
from typing import Optional

from ..config import Settings, get_settings
from ..database import Table
from ..models import Category, Order, Product, Review
from .category import CategoryService
from .order import OrderService
from .product import ProductService
from .review import ReviewService

__all__ = [
    "CategoryService",
    "OrderService",
    "ProductService",
    "ReviewService",
    "Services",
]


@dataclass
class Services:
    """The four mock resource services, each over its own table."""

    products: ProductService
    categories: CategoryService
    orders: OrderService
    reviews: ReviewService

    @classmethod
    def from_fixtures(cls, settings: Optional[Settings] = None) -> "Services":
        settings = settings or get_settings()
        fixtures = settings.fixtures_dir
        return cls(
            products=ProductService(
                Table.from_fixture(Product, fixtures / "products.json"), settings
            ),
            categories=CategoryService(
                Table.from_fixture(Category, fixtures / "categories.json"), settings
            ),
            orders=OrderService(Table.from_fixture(Order, fixtures / "orders.json"), settings),
            reviews=ReviewService(Table.from_fixture(Review, fixtures / "reviews.json"), settings),
        )

    @classmethod
    def empty(cls, settings: Optional[Settings] = None) -> "Services":
        settings = settings or get_settings()
        return cls(
            products=ProductService(Table(Product), settings),
            categories=CategoryService(Table(Category), settings),
            orders=OrderService(Table(Order), settings),
            reviews=ReviewService(Table(Review), settings),
        )
