#!/usr/bin/env python
import asyncio

from marketflow.cart import CartStore, MemoryStorage
from marketflow.checkout import place_order
from marketflow.config import Settings
from marketflow.models import ShippingAddress
from marketflow.services import Services


async def main():
    services = Services.from_fixtures(Settings(latency_scale=0.2))
    cart = CartStore(MemoryStorage())

    # -----------------------------
    # Browse the catalog
    # -----------------------------
    print("Searching for 'audio'...")
    for p in await services.products.search("audio"):
        print(f"  #{p.id} {p.title} ${p.price:.2f}")

    # -----------------------------
    # Fill the cart
    # -----------------------------
    print("\nAdding products to cart...")
    headphones = await services.products.get_by_id(1)
    tee = await services.products.get_by_id(3)
    cart.add_to_cart(headphones)
    cart.add_to_cart(tee, 2)
    cart.add_to_cart(tee)
    for item in cart.items:
        print(f"  {item.title} x{item.quantity}")
    print(f"  subtotal ${cart.subtotal:.2f}")

    # -----------------------------
    # Place order
    # -----------------------------
    print("\nPlacing order...")
    address = ShippingAddress(
        name="Casey Morgan", email="casey@example.com",
        address="9 Orchard Lane", city="Denver", state="CO", zip_code="80202",
    )
    order = await place_order(cart, services.orders, address, buyer_id=9)
    print(f"  order #{order.id} total ${order.total:.2f}, cart now holds {len(cart.items)} items")

    # -----------------------------
    # Deliver and review
    # -----------------------------
    print("\nDelivering order...")
    order = await services.orders.update_status(order.id, "delivered")
    print(f"  status={order.status.value} reviewable={order.reviewable}")

    await services.reviews.create({
        "productId": 1, "buyerId": 9, "rating": 4,
        "comment": "Great sound, a bit heavy on the head.",
    })
    stats = await services.reviews.get_product_stats(1)
    print(f"\nHeadphones: {stats.average_rating} average over {stats.total_reviews} reviews")
    print(f"  distribution {stats.rating_distribution}")


if __name__ == "__main__":
    asyncio.run(main())
