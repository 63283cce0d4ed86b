# tests/test_cart.py
import json
import logging

import pytest

from marketflow.cart import CART_STORAGE_KEY, CartStore, JsonFileStorage, MemoryStorage
from marketflow.errors import ValidationFailed

from factories import make_product


class BrokenStorage(MemoryStorage):
    def set_item(self, key, value):
        raise OSError("disk full")


def stored_items(storage):
    return json.loads(storage.get_item(CART_STORAGE_KEY))


def test_add_same_product_merges_quantities():
    storage = MemoryStorage()
    cart = CartStore(storage)
    lamp = make_product(1)
    cart.add_to_cart(lamp, 2)
    cart.add_to_cart(lamp, 3)

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 5
    assert stored_items(storage)[0]["quantity"] == 5


def test_new_item_snapshots_product():
    storage = MemoryStorage()
    cart = CartStore(storage)
    cart.add_to_cart(make_product(7, price=12.5, title="Rug", seller_id="seller-9"))

    item = cart.items[0]
    assert item.product_id == 7
    assert item.image == "https://img.example.com/7-a.jpg"
    assert item.seller_id == "seller-9"
    assert stored_items(storage) == [{
        "productId": 7,
        "title": "Rug",
        "price": 12.5,
        "image": "https://img.example.com/7-a.jpg",
        "quantity": 1,
        "sellerId": "seller-9",
    }]


def test_price_is_captured_at_add_time():
    cart = CartStore(MemoryStorage())
    cart.add_to_cart(make_product(1, price=10.0))
    cart.add_to_cart(make_product(1, price=99.0))
    assert cart.items[0].price == 10.0
    assert cart.items[0].quantity == 2


def test_add_rejects_non_positive_quantity():
    cart = CartStore(MemoryStorage())
    with pytest.raises(ValidationFailed):
        cart.add_to_cart(make_product(1), 0)
    assert cart.items == []


def test_items_keep_insertion_order():
    cart = CartStore(MemoryStorage())
    for pid in (3, 1, 2):
        cart.add_to_cart(make_product(pid))
    cart.add_to_cart(make_product(1))
    assert [i.product_id for i in cart.items] == [3, 1, 2]


def test_remove_and_missing_remove():
    storage = MemoryStorage()
    cart = CartStore(storage)
    cart.add_to_cart(make_product(1))
    cart.add_to_cart(make_product(2))

    cart.remove_from_cart(1)
    cart.remove_from_cart(42)
    assert [i.product_id for i in cart.items] == [2]
    assert [i["productId"] for i in stored_items(storage)] == [2]


def test_update_quantity():
    cart = CartStore(MemoryStorage())
    cart.add_to_cart(make_product(1))
    cart.add_to_cart(make_product(2))

    cart.update_quantity(1, 4)
    assert cart.items[0].quantity == 4

    cart.update_quantity(1, 0)
    assert [i.product_id for i in cart.items] == [2]

    cart.update_quantity(2, -3)
    assert cart.items == []


def test_update_quantity_unknown_product_is_noop():
    cart = CartStore(MemoryStorage())
    cart.add_to_cart(make_product(1), 2)
    cart.update_quantity(99, 5)
    assert [(i.product_id, i.quantity) for i in cart.items] == [(1, 2)]


def test_clear_cart_persists_empty_list():
    storage = MemoryStorage()
    cart = CartStore(storage)
    cart.add_to_cart(make_product(1), 3)
    cart.clear_cart()
    assert cart.items == []
    assert storage.get_item(CART_STORAGE_KEY) == "[]"


def test_action_sequence_keeps_one_line_per_product():
    cart = CartStore(MemoryStorage())
    actions = [
        ("add", 1, 2), ("add", 2, 1), ("qty", 1, 0), ("add", 1, 1), ("remove", 2, None),
        ("add", 3, 4), ("qty", 3, 2), ("add", 3, 1), ("qty", 5, 3), ("add", 2, 2),
    ]
    for action, pid, qty in actions:
        if action == "add":
            cart.add_to_cart(make_product(pid), qty)
        elif action == "qty":
            cart.update_quantity(pid, qty)
        else:
            cart.remove_from_cart(pid)
        ids = [i.product_id for i in cart.items]
        assert len(ids) == len(set(ids))
        assert all(i.quantity >= 1 for i in cart.items)

    assert {i.product_id: i.quantity for i in cart.items} == {1: 1, 3: 3, 2: 2}


def test_ui_flag_is_transient():
    storage = MemoryStorage()
    cart = CartStore(storage)
    cart.add_to_cart(make_product(1))
    cart.toggle_cart()
    assert cart.is_open is True
    cart.close_cart()
    assert cart.is_open is False
    cart.open_cart()
    assert cart.state.is_open is True
    assert "isOpen" not in storage.get_item(CART_STORAGE_KEY)

    reloaded = CartStore(storage)
    assert reloaded.is_open is False
    assert [i.product_id for i in reloaded.items] == [1]


def test_totals_helpers():
    cart = CartStore(MemoryStorage())
    cart.add_to_cart(make_product(1, price=10.0), 2)
    cart.add_to_cart(make_product(2, price=2.5), 3)
    assert cart.item_count == 5
    assert cart.subtotal == 27.5


@pytest.mark.parametrize("raw", ["not json", '{"productId": 1}', '[{"productId": 1}]'])
def test_unreadable_storage_defaults_to_empty(raw):
    cart = CartStore(MemoryStorage({CART_STORAGE_KEY: raw}))
    assert cart.items == []


def test_write_failure_is_logged_and_swallowed(caplog):
    cart = CartStore(BrokenStorage())
    with caplog.at_level(logging.ERROR, logger="marketflow.cart"):
        cart.add_to_cart(make_product(1))
    assert cart.items[0].product_id == 1
    assert "Could not save cart" in caplog.text


def test_returned_items_are_copies():
    cart = CartStore(MemoryStorage())
    cart.add_to_cart(make_product(1))
    cart.items[0].quantity = 50
    assert cart.items[0].quantity == 1


def test_json_file_storage_round_trip(tmp_path):
    path = tmp_path / "nested" / "cart.json"
    cart = CartStore(JsonFileStorage(path))
    cart.add_to_cart(make_product(4), 2)

    assert path.exists()
    reloaded = CartStore(JsonFileStorage(path))
    assert [(i.product_id, i.quantity) for i in reloaded.items] == [(4, 2)]


def test_json_file_storage_corrupt_file(tmp_path):
    path = tmp_path / "cart.json"
    path.write_text("{broken", encoding="utf-8")
    cart = CartStore(JsonFileStorage(path))
    assert cart.items == []

    cart.add_to_cart(make_product(1))
    assert json.loads(path.read_text(encoding="utf-8"))[CART_STORAGE_KEY].startswith("[")


def test_duplicate_stored_lines_are_merged_on_load():
    line = {"productId": 3, "title": "Mug", "price": 4.5, "image": "https://img.example.com/3.jpg",
            "quantity": 2, "sellerId": "seller-2"}
    other = {**line, "productId": 8, "quantity": 1}
    storage = MemoryStorage({CART_STORAGE_KEY: json.dumps([line, other, {**line, "quantity": 3}])})

    cart = CartStore(storage)
    assert [(i.product_id, i.quantity) for i in cart.items] == [(3, 5), (8, 1)]

    cart.update_quantity(3, 0)
    assert [i.product_id for i in cart.items] == [8]
    assert [i["productId"] for i in stored_items(storage)] == [8]
