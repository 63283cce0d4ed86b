# marketflow/cart.py
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from .errors import ValidationFailed
from .models import CartItem, CartState, Product

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "marketflow_cart"


# ---------------------------
# Durable key-value slots
# ---------------------------
class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStorage:
    """Key-value slots kept as string values in a single JSON object file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except ValueError:
            data = {}
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".cart-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle)
            os.replace(tmp, self.path)
        except BaseException:
            os.unlink(tmp)
            raise


# ---------------------------
# Cart store
# ---------------------------
def _merge_lines(items: Iterable[CartItem]) -> List[CartItem]:
    """Collapse repeated productIds into the first line, summing quantities."""
    merged: Dict[int, CartItem] = {}
    for item in items:
        if item.product_id in merged:
            merged[item.product_id].quantity += item.quantity
        else:
            merged[item.product_id] = item
    return list(merged.values())


class CartStore:
    """Shopping cart state; every item mutation is written through to storage."""

    def __init__(self, storage):
        self.storage = storage
        self._items: List[CartItem] = self._load()
        self.is_open = False

    def _load(self) -> List[CartItem]:
        try:
            raw = self.storage.get_item(CART_STORAGE_KEY)
            if raw is None:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("stored cart is not a list")
            return _merge_lines(CartItem.model_validate(item) for item in data)
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.debug("Ignoring unreadable stored cart: %s", e)
            return []

    def _save(self) -> None:
        try:
            payload = json.dumps(
                [item.model_dump(mode="json", by_alias=True) for item in self._items]
            )
            self.storage.set_item(CART_STORAGE_KEY, payload)
        except (OSError, ValueError, TypeError) as e:
            logger.error("Could not save cart to storage: %s", e)

    def _find(self, product_id: int) -> Optional[CartItem]:
        return next((i for i in self._items if i.product_id == product_id), None)

    # ---------------------------
    # Read side
    # ---------------------------
    @property
    def items(self) -> List[CartItem]:
        return [item.model_copy() for item in self._items]

    @property
    def state(self) -> CartState:
        return CartState(items=self.items, is_open=self.is_open)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def subtotal(self) -> float:
        return round(sum(item.price * item.quantity for item in self._items), 2)

    # ---------------------------
    # Actions
    # ---------------------------
    def add_to_cart(self, product: Product, quantity: int = 1) -> None:
        if quantity < 1:
            raise ValidationFailed("quantity must be > 0")
        existing = self._find(product.id)
        if existing:
            existing.quantity += quantity
        else:
            # price and title are captured now, not re-read later
            self._items.append(
                CartItem(
                    product_id=product.id,
                    title=product.title,
                    price=product.price,
                    image=product.images[0],
                    quantity=quantity,
                    seller_id=product.seller_id,
                )
            )
        self._save()

    def remove_from_cart(self, product_id: int) -> None:
        self._items = [i for i in self._items if i.product_id != product_id]
        self._save()

    def update_quantity(self, product_id: int, quantity: int) -> None:
        item = self._find(product_id)
        if item:
            if quantity <= 0:
                self._items = [i for i in self._items if i.product_id != product_id]
            else:
                item.quantity = quantity
        self._save()

    def clear_cart(self) -> None:
        self._items = []
        self._save()

    def toggle_cart(self) -> None:
        self.is_open = not self.is_open

    def open_cart(self) -> None:
        self.is_open = True

    def close_cart(self) -> None:
        self.is_open = False
