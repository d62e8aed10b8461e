"""Reviews & testimonials shown on a card."""

from __future__ import annotations

from typing import Any, Mapping

from bizcard.core.utils import normalize_external_url
from bizcard.db.models import Review
from bizcard.repositories.sql_repository import SQLRepository
from bizcard.services.card_display import rating_summary
from bizcard.services.card_service import CardNotFoundError, CardService, CardValidationError

MIN_RATING = 1
MAX_RATING = 5


class ReviewService:
    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()
        self.cards = CardService(self.repository)

    def list_reviews(self, user_id: str) -> list[Review]:
        card = self.cards.require_card(user_id)
        return self.repository.list_reviews(card.id)

    def summary(self, user_id: str) -> dict:
        return rating_summary(self.list_reviews(user_id))

    def add_review(self, user_id: str, data: Mapping[str, Any]) -> Review:
        card = self.cards.require_card(user_id)
        name = (data.get("reviewer_name") or "").strip()
        comment = (data.get("comment") or "").strip()
        if not name or not comment:
            raise CardValidationError("Reviewer name and comment are required.")
        try:
            rating = int(data.get("rating", MAX_RATING))
        except (TypeError, ValueError) as exc:
            raise CardValidationError("Rating must be a number.") from exc
        if not MIN_RATING <= rating <= MAX_RATING:
            raise CardValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}.")
        return self.repository.add_review(
            card.id,
            reviewer_name=name,
            reviewer_email=(data.get("reviewer_email") or "").strip() or None,
            reviewer_avatar=(data.get("reviewer_avatar") or "").strip() or None,
            rating=rating,
            comment=comment,
            source_url=normalize_external_url(data.get("source_url")) or None,
            is_featured=bool(data.get("is_featured", False)),
        )

    def _owned_review(self, user_id: str, review_id: str) -> Review:
        card = self.cards.require_card(user_id)
        review = self.repository.get_review(review_id)
        if not review or review.card_id != card.id:
            raise CardNotFoundError(f"Review {review_id} not found")
        return review

    def toggle_featured(self, user_id: str, review_id: str) -> bool:
        review = self._owned_review(user_id, review_id)
        featured = not review.is_featured
        self.repository.set_review_featured(review_id, featured)
        return featured

    def remove(self, user_id: str, review_id: str) -> None:
        self._owned_review(user_id, review_id)
        self.repository.delete_review(review_id)
