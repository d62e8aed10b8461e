from __future__ import annotations

import pytest

from bizcard.repositories.sql_repository import SQLRepository
from bizcard.services.card_service import CardNotFoundError, CardValidationError
from bizcard.services.review_service import ReviewService


@pytest.fixture()
def owner(temp_db):
    repo = SQLRepository()
    user = repo.create_user("reviews@example.com", password_hash="hash")
    repo.create_card(user.id, {"title": "Reviewed"})
    return user.id


def test_add_feature_and_summarize(owner):
    svc = ReviewService()
    first = svc.add_review(owner, {"reviewer_name": "Ana", "comment": "Great work", "rating": 5})
    svc.add_review(owner, {"reviewer_name": "Bo", "comment": "Good", "rating": 4, "source_url": "g.co/r/1"})
    svc.add_review(owner, {"reviewer_name": "Cy", "comment": "Fine", "rating": 4})

    assert svc.summary(owner) == {"count": 3, "average": 4.3}
    assert svc.toggle_featured(owner, first.id) is True
    assert svc.toggle_featured(owner, first.id) is False

    urls = {r.reviewer_name: r.source_url for r in svc.list_reviews(owner)}
    assert urls["Bo"] == "https://g.co/r/1"

    svc.remove(owner, first.id)
    assert len(svc.list_reviews(owner)) == 2


@pytest.mark.parametrize(
    "payload",
    [
        {"reviewer_name": "", "comment": "text"},
        {"reviewer_name": "Ana", "comment": "   "},
        {"reviewer_name": "Ana", "comment": "text", "rating": 0},
        {"reviewer_name": "Ana", "comment": "text", "rating": 6},
        {"reviewer_name": "Ana", "comment": "text", "rating": "five"},
    ],
)
def test_invalid_reviews_are_rejected(owner, payload):
    with pytest.raises(CardValidationError):
        ReviewService().add_review(owner, payload)


def test_empty_summary(owner):
    assert ReviewService().summary(owner) == {"count": 0, "average": None}


def test_reviews_require_a_card(temp_db):
    repo = SQLRepository()
    user = repo.create_user("nocard@example.com", password_hash="hash")
    with pytest.raises(CardNotFoundError):
        ReviewService().list_reviews(user.id)
