# sdk/client.py
from typing import Any, Dict, List, Optional

import httpx
import requests


class StoreClient:
    """Thin requests wrapper over the marketflow HTTP API.

    Bodies go out and come back in the API's camelCase JSON form.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8085",
        timeout: int = 10,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.timeout = timeout
        self.async_transport = async_transport

    def _get(self, path: str, **params) -> Any:
        params = {k: v for k, v in params.items() if v is not None}
        r = self.session.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def _send(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        r = self.session.request(method, f"{self.base_url}{path}", json=json, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def reset(self):
        return self._send("POST", "/reset")

    # Products
    def list_products(self, category: Optional[str] = None, seller_id: Optional[str] = None) -> List[dict]:
        return self._get("/products", category=category, sellerId=seller_id)

    def search_products(self, query: str) -> List[dict]:
        return self._get("/products", q=query)

    def get_product(self, product_id: int) -> dict:
        return self._get(f"/products/{product_id}")

    def create_product(self, product: Dict[str, Any]) -> dict:
        return self._send("POST", "/products", product)

    def update_product(self, product_id: int, changes: Dict[str, Any]) -> dict:
        return self._send("PUT", f"/products/{product_id}", changes)

    def delete_product(self, product_id: int) -> dict:
        return self._send("DELETE", f"/products/{product_id}")

    # Categories
    def list_categories(self) -> List[dict]:
        return self._get("/categories")

    def category_tree(self) -> List[dict]:
        return self._get("/categories/tree")

    def subcategories(self, category_id: int) -> List[dict]:
        return self._get(f"/categories/{category_id}/children")

    def create_category(self, name: str, parent_id: Optional[int] = None) -> dict:
        return self._send("POST", "/categories", {"name": name, "parentId": parent_id})

    def delete_category(self, category_id: int) -> dict:
        return self._send("DELETE", f"/categories/{category_id}")

    # Orders
    def list_orders(self, buyer_id: Optional[int] = None, status: Optional[str] = None) -> List[dict]:
        return self._get("/orders", buyerId=buyer_id, status=status)

    def get_order(self, order_id: int) -> dict:
        return self._get(f"/orders/{order_id}")

    def create_order(self, order: Dict[str, Any]) -> dict:
        return self._send("POST", "/orders", order)

    def update_order_status(self, order_id: int, status: str) -> dict:
        return self._send("POST", f"/orders/{order_id}/status", {"status": status})

    # Reviews
    def product_reviews(self, product_id: int) -> List[dict]:
        return self._get(f"/reviews/product/{product_id}")

    def product_stats(self, product_id: int) -> dict:
        return self._get(f"/reviews/product/{product_id}/stats")

    def buyer_reviews(self, buyer_id: int) -> List[dict]:
        return self._get(f"/reviews/buyer/{buyer_id}")

    def can_review(self, product_id: int, buyer_id: int) -> bool:
        return self._get("/reviews/can-review", productId=product_id, buyerId=buyer_id)["canReview"]

    def create_review(self, review: Dict[str, Any]) -> dict:
        return self._send("POST", "/reviews", review)

    def mark_helpful(self, review_id: int) -> dict:
        return self._send("POST", f"/reviews/{review_id}/helpful")

    # Async create (example); returns the raw response so callers can inspect 400/409
    async def create_review_async(self, review: Dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.async_transport
        ) as client:
            return await client.post("/reviews", json=review)
