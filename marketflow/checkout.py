# marketflow/checkout.py
import logging
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from .cart import CartStore
from .errors import ValidationFailed
from .models import CartItem, Order, OrderIn, OrderItem, ShippingAddress
from .services import OrderService

logger = logging.getLogger(__name__)

FREE_SHIPPING_OVER = 100
FLAT_SHIPPING = 9.99
TAX_RATE = 0.08

# display splits for orders stored without a breakdown: the confirmation
# page showed 85/7/8, the order history 90/10 with no tax line
LEGACY_SPLIT = {"subtotal": 0.85, "shipping": 0.07, "tax": 0.08}
HISTORY_SPLIT = {"subtotal": 0.9, "shipping": 0.1, "tax": 0.0}


class Totals(BaseModel):
    subtotal: float
    shipping: float
    tax: float
    total: float


def compute_totals(items: Iterable[CartItem]) -> Totals:
    subtotal = sum(item.price * item.quantity for item in items)
    shipping = 0 if subtotal > FREE_SHIPPING_OVER else FLAT_SHIPPING
    tax = subtotal * TAX_RATE
    return Totals(
        subtotal=round(subtotal, 2),
        shipping=round(shipping, 2),
        tax=round(tax, 2),
        total=round(subtotal + shipping + tax, 2),
    )


def order_breakdown(order: Order, split: Dict[str, float] = LEGACY_SPLIT) -> Totals:
    if order.subtotal is not None and order.shipping is not None and order.tax is not None:
        return Totals(subtotal=order.subtotal, shipping=order.shipping, tax=order.tax, total=order.total)
    parts = {name: round(order.total * share, 2) for name, share in split.items()}
    return Totals(total=order.total, **parts)


def history_breakdown(order: Order) -> Totals:
    return order_breakdown(order, HISTORY_SPLIT)


def build_order(
    items: List[CartItem], address: ShippingAddress, buyer_id: Optional[int] = None
) -> OrderIn:
    if not items:
        raise ValidationFailed("cart empty")

    totals = compute_totals(items)
    return OrderIn(
        items=[OrderItem(product_id=i.product_id, quantity=i.quantity, price=i.price) for i in items],
        total=totals.total,
        shipping_address=address,
        buyer_id=buyer_id,
        subtotal=totals.subtotal,
        shipping=totals.shipping,
        tax=totals.tax,
    )


async def place_order(
    cart: CartStore,
    orders: OrderService,
    address: ShippingAddress,
    buyer_id: Optional[int] = None,
) -> Order:
    """Turn the cart into a pending order, then empty the cart."""
    items = cart.items
    order = await orders.create(build_order(items, address, buyer_id))
    cart.clear_cart()
    logger.info("Placed order %s for %d items, total %.2f", order.id, len(items), order.total)
    return order
