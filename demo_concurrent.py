import asyncio

from marketflow.config import Settings
from marketflow.errors import ConflictFailed
from marketflow.services import Services


async def submit_review(services, buyer_name, comment):
    try:
        review = await services.reviews.create({
            "productId": 2, "buyerId": 42, "rating": 5,
            "comment": comment, "buyerName": buyer_name,
        })
        print(f"✅ {buyer_name} review stored as #{review.id}")
    except ConflictFailed as e:
        print(f"❌ {buyer_name} rejected: {e}")


async def add_category(services, name):
    category = await services.categories.create({"name": name, "parentId": 1})
    print(f"🏷️  {name} -> #{category.id}")


async def main():
    services = Services.from_fixtures(Settings(latency_scale=0.5))

    # Same buyer/product pair from two tabs: only one review survives
    print("\n⚡ Simulating duplicate review submissions...")
    await asyncio.gather(
        submit_review(services, "tab-1", "Lovely switches, very satisfying to type on."),
        submit_review(services, "tab-2", "Second submission of the same review text."),
    )

    # Concurrent creates still receive distinct ids
    print("\n⚡ Simulating concurrent category creation...")
    await asyncio.gather(*(add_category(services, name) for name in ("Cameras", "Phones", "Wearables")))

    print("\n📦 Final categories:", [c.name for c in await services.categories.get_all()])


if __name__ == "__main__":
    asyncio.run(main())
