# tests/test_sdk.py
import asyncio

import pytest
import requests

from factories import make_address, review_payload


def test_catalog_reads(store_client):
    assert len(store_client.list_products()) == 6
    assert {p["Id"] for p in store_client.list_products(category="Audio")} == {1, 6}
    assert {p["Id"] for p in store_client.list_products(seller_id="seller-2")} == {3, 4}
    assert [p["Id"] for p in store_client.search_products("KEYBOARD")] == [2]
    assert store_client.get_product(5)["stock"] == 0


def test_http_errors_raise_with_detail(store_client):
    with pytest.raises(requests.HTTPError) as exc:
        store_client.get_product(999)
    assert exc.value.response.status_code == 404
    assert exc.value.response.json()["detail"] == "Product with ID 999 not found"


def test_seller_product_management(store_client):
    created = store_client.create_product({
        "title": "Bamboo Cutting Board",
        "price": 32.0,
        "category": "Kitchen",
        "stock": 12,
        "images": ["https://img.example.com/board.jpg"],
        "sellerId": "seller-1",
    })
    assert created["Id"] == 7

    updated = store_client.update_product(7, {"price": 29.5, "stock": 10})
    assert (updated["price"], updated["stock"], updated["title"]) == (29.5, 10, "Bamboo Cutting Board")

    assert store_client.delete_product(7)["Id"] == 7
    with pytest.raises(requests.HTTPError):
        store_client.get_product(7)


def test_category_management(store_client):
    assert [c["Id"] for c in store_client.subcategories(1)] == [2, 3]
    tree = store_client.category_tree()
    assert [node["category"]["name"] for node in tree] == ["Electronics", "Clothing", "Home"]
    assert [child["category"]["Id"] for child in tree[0]["children"]] == [2, 3]

    created = store_client.create_category("Lighting", parent_id=7)
    assert (created["Id"], created["parentId"]) == (9, 7)

    with pytest.raises(requests.HTTPError) as exc:
        store_client.delete_category(7)
    assert exc.value.response.status_code == 409
    assert store_client.delete_category(9)["name"] == "Lighting"


def test_order_calls(store_client):
    assert {o["Id"] for o in store_client.list_orders(buyer_id=1)} == {1, 3}
    assert [o["Id"] for o in store_client.list_orders(status="shipped")] == [2]

    created = store_client.create_order({
        "items": [{"productId": 2, "quantity": 1, "price": 129.5}],
        "total": 139.86,
        "shippingAddress": make_address().model_dump(mode="json", by_alias=True),
    })
    assert (created["status"], created["reviewable"]) == ("pending", False)

    delivered = store_client.update_order_status(created["Id"], "delivered")
    assert delivered["reviewable"] is True
    assert store_client.get_order(created["Id"])["status"] == "delivered"


def test_review_calls(store_client):
    assert [r["Id"] for r in store_client.product_reviews(1)] == [2, 1]
    assert store_client.product_stats(1)["averageRating"] == 4.5
    assert [r["Id"] for r in store_client.buyer_reviews(2)] == [3]
    assert store_client.can_review(1, 1) is False
    assert store_client.can_review(1, 2) is True

    created = store_client.create_review(review_payload(product_id=1, buyer_id=2))
    assert created["buyerName"] == "Anonymous Buyer"
    assert store_client.can_review(1, 2) is False
    assert store_client.mark_helpful(created["Id"])["helpful"] == 1


def test_create_review_async(store_client):
    async def main():
        first = await store_client.create_review_async(review_payload(product_id=6, buyer_id=4))
        second = await store_client.create_review_async(review_payload(product_id=6, buyer_id=4))
        short = await store_client.create_review_async(review_payload(product_id=6, buyer_id=5, comment="meh"))
        return first, second, short

    first, second, short = asyncio.run(main())
    assert first.status_code == 201
    assert first.json()["productId"] == 6
    assert second.status_code == 409
    assert second.json() == {"detail": "You have already reviewed this product"}
    assert short.status_code == 400


def test_reset_restores_fixtures(store_client):
    store_client.delete_product(1)
    assert store_client.reset() == {"status": "reset"}
    assert len(store_client.list_products()) == 6
