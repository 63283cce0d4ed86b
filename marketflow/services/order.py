# marketflow/services/order.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..errors import ValidationFailed
from ..models import Order, OrderStatus
from .base import MockService


def parse_status(status: Any) -> OrderStatus:
    try:
        return OrderStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationFailed(f"Invalid order status '{status}' (expected one of: {allowed})")


class OrderService(MockService[Order]):
    model = Order
    delays = {
        "get_all": 400,
        "get_by_id": 250,
        "create": 600,
        "update": 400,
        "delete": 300,
        "get_by_buyer": 350,
        "get_by_status": 300,
        "update_status": 200,
    }

    def _prepare_create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        values["created_at"] = datetime.now(timezone.utc)
        # reviews open up only once the order is delivered
        values["reviewable"] = False
        return values

    async def get_by_buyer(self, buyer_id: Optional[int]) -> List[Order]:
        await self._pause("get_by_buyer")
        return self.table.filter(lambda o: o.buyer_id == buyer_id)

    async def get_by_status(self, status: Any) -> List[Order]:
        await self._pause("get_by_status")
        wanted = parse_status(status)
        return self.table.filter(lambda o: o.status == wanted)

    async def update_status(self, order_id: int, status: Any) -> Order:
        await self._pause("update_status")
        order = self.table.get(order_id)
        order.status = parse_status(status)
        if order.status is OrderStatus.delivered:
            order.reviewable = True
        return self.table.replace(order_id, order)
