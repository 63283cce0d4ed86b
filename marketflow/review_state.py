# marketflow/review_state.py
from typing import List, Optional

from .models import Review


class ReviewState:
    """Client-side cache of reviews shown by the review pages."""

    def __init__(self):
        self.reviews: List[Review] = []
        self.loading = False
        self.error: Optional[str] = None
        self.selected_product_reviews: List[Review] = []
        self.user_reviews: List[Review] = []

    def set_loading(self, loading: bool) -> None:
        self.loading = loading

    def set_error(self, error: Optional[str]) -> None:
        self.error = error

    def clear_error(self) -> None:
        self.error = None

    def set_reviews(self, reviews: List[Review]) -> None:
        self.reviews = list(reviews)

    def add_review(self, review: Review) -> None:
        self.reviews.append(review)
        self.user_reviews.append(review)

    def update_review(self, review: Review) -> None:
        for bucket in (self.reviews, self.user_reviews):
            for index, existing in enumerate(bucket):
                if existing.id == review.id:
                    bucket[index] = review
                    break

    def delete_review(self, review_id: int) -> None:
        self.reviews = [r for r in self.reviews if r.id != review_id]
        self.user_reviews = [r for r in self.user_reviews if r.id != review_id]

    def set_selected_product_reviews(self, reviews: List[Review]) -> None:
        self.selected_product_reviews = list(reviews)

    def set_user_reviews(self, reviews: List[Review]) -> None:
        self.user_reviews = list(reviews)
