# marketflow/main.py
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .category_tree import CategoryNode
from .config import Settings, get_settings
from .errors import StoreError
from .log import setup_logging
from .models import (
    Category, CategoryIn, CategoryUpdate, Order, OrderIn, OrderUpdate, Product,
    ProductIn, ProductRating, ProductStats, ProductUpdate, Review, ReviewIn,
    ReviewUpdate, StatusUpdate,
)
from .services import Services

logger = logging.getLogger(__name__)


def get_services(request: Request) -> Services:
    return request.app.state.services


def create_app(services: Optional[Services] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="marketflow (mock storefront API)")
    app.state.settings = settings
    app.state.services = services or Services.from_fixtures(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    # ---------------------------
    # Product endpoints
    # ---------------------------
    @app.get("/products", response_model=List[Product])
    async def list_products(
        category: Optional[str] = None,
        seller_id: Optional[str] = Query(None, alias="sellerId"),
        q: Optional[str] = None,
        svc: Services = Depends(get_services),
    ):
        if q:
            return await svc.products.search(q)
        if category:
            return await svc.products.get_by_category(category)
        if seller_id:
            return await svc.products.get_by_seller(seller_id)
        return await svc.products.get_all()

    @app.post("/products", response_model=Product, status_code=201)
    async def create_product(payload: ProductIn, svc: Services = Depends(get_services)):
        return await svc.products.create(payload)

    @app.get("/products/{product_id}", response_model=Product)
    async def get_product(product_id: int, svc: Services = Depends(get_services)):
        return await svc.products.get_by_id(product_id)

    @app.put("/products/{product_id}", response_model=Product)
    async def update_product(product_id: int, payload: ProductUpdate, svc: Services = Depends(get_services)):
        return await svc.products.update(product_id, payload)

    @app.delete("/products/{product_id}", response_model=Product)
    async def delete_product(product_id: int, svc: Services = Depends(get_services)):
        return await svc.products.delete(product_id)

    # ---------------------------
    # Category endpoints
    # ---------------------------
    @app.get("/categories", response_model=List[Category])
    async def list_categories(svc: Services = Depends(get_services)):
        return await svc.categories.get_all()

    @app.post("/categories", response_model=Category, status_code=201)
    async def create_category(payload: CategoryIn, svc: Services = Depends(get_services)):
        return await svc.categories.create(payload)

    @app.get("/categories/roots", response_model=List[Category])
    async def root_categories(svc: Services = Depends(get_services)):
        return await svc.categories.get_root_categories()

    @app.get("/categories/tree", response_model=List[CategoryNode])
    async def category_tree(svc: Services = Depends(get_services)):
        return await svc.categories.get_tree()

    @app.get("/categories/{category_id}", response_model=Category)
    async def get_category(category_id: int, svc: Services = Depends(get_services)):
        return await svc.categories.get_by_id(category_id)

    @app.get("/categories/{category_id}/children", response_model=List[Category])
    async def subcategories(category_id: int, svc: Services = Depends(get_services)):
        return await svc.categories.get_subcategories(category_id)

    @app.put("/categories/{category_id}", response_model=Category)
    async def update_category(category_id: int, payload: CategoryUpdate, svc: Services = Depends(get_services)):
        return await svc.categories.update(category_id, payload)

    @app.delete("/categories/{category_id}", response_model=Category)
    async def delete_category(category_id: int, svc: Services = Depends(get_services)):
        return await svc.categories.delete(category_id)

    # ---------------------------
    # Order endpoints
    # ---------------------------
    @app.get("/orders", response_model=List[Order])
    async def list_orders(
        buyer_id: Optional[int] = Query(None, alias="buyerId"),
        status: Optional[str] = None,
        svc: Services = Depends(get_services),
    ):
        if status:
            return await svc.orders.get_by_status(status)
        if buyer_id is not None:
            return await svc.orders.get_by_buyer(buyer_id)
        return await svc.orders.get_all()

    @app.post("/orders", response_model=Order, status_code=201)
    async def create_order(payload: OrderIn, svc: Services = Depends(get_services)):
        return await svc.orders.create(payload)

    @app.get("/orders/{order_id}", response_model=Order)
    async def get_order(order_id: int, svc: Services = Depends(get_services)):
        return await svc.orders.get_by_id(order_id)

    @app.put("/orders/{order_id}", response_model=Order)
    async def update_order(order_id: int, payload: OrderUpdate, svc: Services = Depends(get_services)):
        return await svc.orders.update(order_id, payload)

    @app.post("/orders/{order_id}/status", response_model=Order)
    async def update_order_status(order_id: int, payload: StatusUpdate, svc: Services = Depends(get_services)):
        return await svc.orders.update_status(order_id, payload.status)

    @app.delete("/orders/{order_id}", response_model=Order)
    async def delete_order(order_id: int, svc: Services = Depends(get_services)):
        return await svc.orders.delete(order_id)

    # ---------------------------
    # Review endpoints
    # ---------------------------
    @app.get("/reviews", response_model=List[Review])
    async def list_reviews(svc: Services = Depends(get_services)):
        return await svc.reviews.get_all()

    @app.post("/reviews", response_model=Review, status_code=201)
    async def create_review(payload: ReviewIn, svc: Services = Depends(get_services)):
        return await svc.reviews.create(payload)

    @app.get("/reviews/can-review")
    async def can_review(
        product_id: int = Query(..., alias="productId"),
        buyer_id: int = Query(..., alias="buyerId"),
        svc: Services = Depends(get_services),
    ):
        return {"canReview": await svc.reviews.can_review(product_id, buyer_id)}

    @app.get("/reviews/product/{product_id}", response_model=List[Review])
    async def product_reviews(product_id: int, svc: Services = Depends(get_services)):
        return await svc.reviews.get_by_product_id(product_id)

    @app.get("/reviews/product/{product_id}/stats", response_model=ProductStats)
    async def product_stats(product_id: int, svc: Services = Depends(get_services)):
        return await svc.reviews.get_product_stats(product_id)

    @app.get("/reviews/product/{product_id}/rating", response_model=ProductRating)
    async def product_rating(product_id: int, svc: Services = Depends(get_services)):
        return await svc.reviews.get_product_rating(product_id)

    @app.get("/reviews/buyer/{buyer_id}", response_model=List[Review])
    async def buyer_reviews(buyer_id: int, svc: Services = Depends(get_services)):
        return await svc.reviews.get_by_buyer_id(buyer_id)

    @app.get("/reviews/{review_id}", response_model=Review)
    async def get_review(review_id: int, svc: Services = Depends(get_services)):
        return await svc.reviews.get_by_id(review_id)

    @app.put("/reviews/{review_id}", response_model=Review)
    async def update_review(review_id: int, payload: ReviewUpdate, svc: Services = Depends(get_services)):
        return await svc.reviews.update(review_id, payload)

    @app.post("/reviews/{review_id}/helpful", response_model=Review)
    async def mark_helpful(review_id: int, svc: Services = Depends(get_services)):
        return await svc.reviews.mark_helpful(review_id)

    @app.delete("/reviews/{review_id}", response_model=Review)
    async def delete_review(review_id: int, svc: Services = Depends(get_services)):
        return await svc.reviews.delete(review_id)

    # ---------------------------
    # Utility: reseed every table from the fixtures
    # ---------------------------
    @app.post("/reset")
    async def reset_all(request: Request):
        request.app.state.services = Services.from_fixtures(request.app.state.settings)
        return {"status": "reset"}

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings=settings), host="0.0.0.0", port=8085)


if __name__ == "__main__":
    run()
