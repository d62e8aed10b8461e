"""
Slug assignment performed by the card before-write hooks against SQLite.
"""
from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

import bizcard.db.events as slug_events
from bizcard.repositories.sql_repository import SQLRepository
from bizcard.services.card_service import CardConflictError, CardService
from bizcard.services.slug_service import SlugService


def _user(repo: SQLRepository, email: str) -> str:
    return repo.create_user(email, password_hash="hash").id


def test_insert_generates_slug_from_title(temp_db):
    repo = SQLRepository()
    uid = _user(repo, "jane@example.com")
    card = repo.create_card(uid, {"title": "Jane Doe"})
    assert card.slug == "jane-doe"


def test_insert_without_title_or_slug_uses_fallback_word(temp_db):
    repo = SQLRepository()
    uid = _user(repo, "anon@example.com")
    card = repo.create_card(uid, {"slug": ""})
    assert card.slug == "card"


def test_insert_with_degenerate_slug_gets_random_one(temp_db):
    repo = SQLRepository()
    uid = _user(repo, "bang@example.com")
    card = repo.create_card(uid, {"slug": "!!!"})
    assert card.slug.startswith("card-")
    assert len(card.slug) == 13


def test_suffixed_slug_collision_increments_counter(temp_db):
    repo = SQLRepository()
    first = repo.create_card(_user(repo, "a@example.com"), {"slug": "card-1"})
    second = repo.create_card(_user(repo, "b@example.com"), {"slug": "Card 1"})
    assert first.slug == "card-1"
    assert second.slug == "card-2"


def test_second_user_claiming_slug_gets_suffix(temp_db):
    repo = SQLRepository()
    alice = repo.create_card(_user(repo, "u@example.com"), {"slug": "alice"})
    other = repo.create_card(_user(repo, "v@example.com"), {"slug": "alice"})
    assert alice.slug == "alice"
    assert other.slug == "alice-1"


def test_owner_resubmitting_slug_keeps_it(temp_db):
    repo = SQLRepository()
    uid = _user(repo, "u@example.com")
    card = repo.create_card(uid, {"slug": "alice"})
    updated = repo.update_card(card.id, {"slug": "alice", "title": "Alice"})
    assert updated.slug == "alice"
    updated = repo.update_card(card.id, {"slug": "ALICE"})
    assert updated.slug == "alice"


def test_update_to_taken_slug_gets_suffix(temp_db):
    repo = SQLRepository()
    repo.create_card(_user(repo, "u@example.com"), {"slug": "alice"})
    card = repo.create_card(_user(repo, "v@example.com"), {"slug": "victor"})
    updated = repo.update_card(card.id, {"slug": "alice"})
    assert updated.slug == "alice-1"


def test_unrelated_update_never_rescans_slug(temp_db, monkeypatch):
    repo = SQLRepository()
    uid = _user(repo, "u@example.com")
    card = repo.create_card(uid, {"slug": "alice"})

    def _everything_taken(connection):
        return lambda candidate, excluded_owner: True

    monkeypatch.setattr(slug_events, "connection_slug_checker", _everything_taken)
    updated = repo.update_card(card.id, {"phone": "+5511999999999"})
    assert updated.slug == "alice"
    assert updated.phone == "+5511999999999"


def test_unique_constraint_is_final_backstop(temp_db, monkeypatch):
    repo = SQLRepository()
    repo.create_card(_user(repo, "u@example.com"), {"slug": "alice"})
    uid = _user(repo, "v@example.com")

    # simulate a concurrent writer that saw "alice" as free
    monkeypatch.setattr(slug_events, "connection_slug_checker", lambda connection: lambda c, o: False)
    with pytest.raises(IntegrityError):
        repo.create_card(uid, {"slug": "alice"})

    with pytest.raises(CardConflictError):
        CardService(repo).save_card(uid, {"slug": "alice"})


def test_one_card_per_user(temp_db):
    repo = SQLRepository()
    uid = _user(repo, "u@example.com")
    repo.create_card(uid, {"title": "First"})
    with pytest.raises(IntegrityError):
        repo.create_card(uid, {"title": "Second"})


def test_slug_service_preview_and_assign(temp_db):
    repo = SQLRepository()
    owner = _user(repo, "u@example.com")
    other = _user(repo, "v@example.com")
    repo.create_card(owner, {"slug": "alice"})
    repo.create_card(other, {"slug": "victor"})
    svc = SlugService()

    assert svc.preview("Alice", owner) == "alice"
    assert svc.preview("Alice", other) == "alice-1"
    assert svc.preview("Alice") == "alice-1"
    assert svc.is_available("alice", owner) is True
    assert svc.is_available("alice", other) is False
    assert svc.is_available("!!!") is False

    assert svc.assign_slug(other, "Alice") == "alice-1"
    assert repo.get_card_by_owner(other).slug == "alice-1"
