# marketflow/services/product.py
from datetime import datetime, timezone
from typing import Any, Dict, List

from ..models import Product
from .base import MockService


class ProductService(MockService[Product]):
    model = Product
    delays = {
        "get_all": 300,
        "get_by_id": 200,
        "create": 500,
        "update": 400,
        "delete": 300,
        "get_by_category": 250,
        "get_by_seller": 250,
        "search": 300,
    }

    def _prepare_create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        values["created_at"] = datetime.now(timezone.utc)
        return values

    async def get_by_category(self, category: str) -> List[Product]:
        await self._pause("get_by_category")
        return self.table.filter(lambda p: p.category == category)

    async def get_by_seller(self, seller_id: str) -> List[Product]:
        await self._pause("get_by_seller")
        return self.table.filter(lambda p: p.seller_id == seller_id)

    async def search(self, query: str) -> List[Product]:
        await self._pause("search")
        term = query.lower()
        return self.table.filter(
            lambda p: term in p.title.lower()
            or term in p.description.lower()
            or term in p.category.lower()
        )
