# marketflow/services/category.py
from typing import List, Optional

from ..category_tree import CategoryNode, build_tree
from ..errors import ConflictFailed
from ..models import Category
from .base import MockService


class CategoryService(MockService[Category]):
    model = Category
    delays = {
        "get_all": 200,
        "get_by_id": 150,
        "create": 300,
        "update": 250,
        "delete": 200,
        "get_root_categories": 150,
        "get_subcategories": 150,
        "get_tree": 200,
    }

    def _check_delete(self, record_id: int) -> None:
        self.table.get(record_id)
        if self.table.any(lambda c: c.parent_id == record_id):
            raise ConflictFailed("Cannot delete category that has subcategories")

    async def get_root_categories(self) -> List[Category]:
        await self._pause("get_root_categories")
        return self.table.filter(lambda c: c.parent_id is None)

    async def get_subcategories(self, parent_id: Optional[int]) -> List[Category]:
        await self._pause("get_subcategories")
        return self.table.filter(lambda c: c.parent_id == parent_id)

    async def get_tree(self) -> List[CategoryNode]:
        await self._pause("get_tree")
        return build_tree(self.table.all())
