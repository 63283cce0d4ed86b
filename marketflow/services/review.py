# marketflow/services/review.py
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..errors import ConflictFailed, ValidationFailed
from ..models import ProductRating, ProductStats, Review
from .base import MockService

MIN_COMMENT_LENGTH = 10


def _check_rating(rating: Any) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationFailed("Rating must be between 1 and 5")


def _check_comment(comment: Any) -> str:
    if not isinstance(comment, str) or len(comment.strip()) < MIN_COMMENT_LENGTH:
        raise ValidationFailed(
            f"Review comment must be at least {MIN_COMMENT_LENGTH} characters long"
        )
    return comment.strip()


def one_decimal(value: float) -> float:
    """Round half up to one decimal (4.25 -> 4.3), unlike round()."""
    return math.floor(value * 10 + 0.5) / 10


def _newest_first(reviews: List[Review]) -> List[Review]:
    return sorted(reviews, key=lambda r: r.created_at, reverse=True)


class ReviewService(MockService[Review]):
    model = Review
    delays = {
        "get_all": 300,
        "get_by_id": 200,
        "create": 500,
        "update": 400,
        "delete": 300,
        "get_by_product_id": 250,
        "get_by_buyer_id": 250,
        "get_product_rating": 200,
        "mark_helpful": 250,
        "can_review": 200,
        "get_product_stats": 250,
    }

    def _has_review(self, product_id: int, buyer_id: int, exclude_id: Optional[int] = None) -> bool:
        return self.table.any(
            lambda r: r.product_id == product_id and r.buyer_id == buyer_id and r.id != exclude_id
        )

    def _prepare_create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        product_id = values.get("product_id")
        buyer_id = values.get("buyer_id")
        if not product_id or not buyer_id:
            raise ValidationFailed("Product ID and Buyer ID are required")
        _check_rating(values.get("rating"))
        comment = _check_comment(values.get("comment"))

        now = datetime.now(timezone.utc)
        return {
            "product_id": product_id,
            "buyer_id": buyer_id,
            "rating": values["rating"],
            "comment": comment,
            "buyer_name": values.get("buyer_name") or "Anonymous Buyer",
            "buyer_email": values.get("buyer_email") or "",
            "created_at": now,
            "updated_at": now,
            "helpful": 0,
            # every review is treated as coming from a verified purchase
            "verified": True,
        }

    def _prepare_update(self, current: Review, changes: Dict[str, Any]) -> Dict[str, Any]:
        changes = {k: v for k, v in changes.items() if v is not None}
        if "rating" in changes:
            _check_rating(changes["rating"])
        if "comment" in changes:
            changes["comment"] = _check_comment(changes["comment"])
        changes["updated_at"] = datetime.now(timezone.utc)
        return changes

    def _check_record(self, record: Review) -> None:
        # ids are compared after coercion, so "5" and 5 are the same product
        if self._has_review(record.product_id, record.buyer_id, exclude_id=record.id):
            raise ConflictFailed("You have already reviewed this product")

    async def get_by_product_id(self, product_id: int) -> List[Review]:
        await self._pause("get_by_product_id")
        return _newest_first(self.table.filter(lambda r: r.product_id == product_id))

    async def get_by_buyer_id(self, buyer_id: int) -> List[Review]:
        await self._pause("get_by_buyer_id")
        return _newest_first(self.table.filter(lambda r: r.buyer_id == buyer_id))

    async def get_product_rating(self, product_id: int) -> ProductRating:
        await self._pause("get_product_rating")
        ratings = [r.rating for r in self.table.filter(lambda r: r.product_id == product_id)]
        if not ratings:
            return ProductRating(average=0, count=0)
        return ProductRating(average=one_decimal(sum(ratings) / len(ratings)), count=len(ratings))

    async def mark_helpful(self, review_id: int) -> Review:
        await self._pause("mark_helpful")
        review = self.table.get(review_id)
        review.helpful += 1
        return self.table.replace(review_id, review)

    async def can_review(self, product_id: int, buyer_id: int) -> bool:
        # purchase history is not consulted; only an existing review blocks
        await self._pause("can_review")
        return not self._has_review(product_id, buyer_id)

    async def get_product_stats(self, product_id: int) -> ProductStats:
        await self._pause("get_product_stats")
        distribution = {rating: 0 for rating in range(1, 6)}
        total = 0
        reviews = self.table.filter(lambda r: r.product_id == product_id)
        for review in reviews:
            distribution[review.rating] += 1
            total += review.rating

        average = one_decimal(total / len(reviews)) if reviews else 0
        return ProductStats(
            total_reviews=len(reviews),
            average_rating=average,
            rating_distribution=distribution,
        )
