"""Domain helpers for slug normalization, uniqueness and assignment."""
from __future__ import annotations

import enum
import re
import secrets
from typing import Callable, Iterable, Optional, Tuple

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_COUNTER_SUFFIX = re.compile(r"^(?P<stem>.+)-(?P<n>\d+)$")

FALLBACK_PREFIX = "card"
FALLBACK_SEED = "card"

# is_taken(candidate, excluded_owner) -> True when another owner holds candidate
SlugChecker = Callable[[str, Optional[str]], bool]


class WriteOperation(str, enum.Enum):
    INSERT = "insert"
    UPDATE = "update"


def normalize_slug(value: str | None) -> str:
    """Lower-case and collapse every run of non [a-z0-9] chars into one hyphen."""
    text = (value or "").lower()
    return _NON_ALNUM.sub("-", text).strip("-")


def random_base() -> str:
    return f"{FALLBACK_PREFIX}-{secrets.token_hex(4)}"


def _probe_start(base: str) -> Tuple[str, int]:
    """Split "name-3" into ("name", 4) so probing continues the existing counter."""
    match = _COUNTER_SUFFIX.match(base)
    if match:
        return match.group("stem"), int(match.group("n")) + 1
    return base, 1


def generate_unique_slug(
    seed_text: str | None,
    is_taken: SlugChecker,
    excluded_owner: Optional[str] = None,
    *,
    fallback: Callable[[], str] = random_base,
) -> str:
    """
    Derive a URL-safe slug from seed_text that no other owner holds.

    Rows owned by excluded_owner never count as a conflict, which lets a user
    keep or reuse their own slug. Conflicting bases get a numeric suffix
    (-1, -2, ...) probed in order until a free value is found.
    """
    base = normalize_slug(seed_text) or fallback()
    if not is_taken(base, excluded_owner):
        return base
    stem, counter = _probe_start(base)
    while True:
        candidate = f"{stem}-{counter}"
        if not is_taken(candidate, excluded_owner):
            return candidate
        counter += 1


def resolve_card_slug(
    operation: WriteOperation,
    new_slug: str | None,
    *,
    old_slug: str | None = None,
    title: str | None = None,
    owner: Optional[str] = None,
    is_taken: SlugChecker,
) -> str:
    """Decide the slug a card row is written with for one insert/update."""
    requested = (new_slug or "").strip()
    if not requested:
        seed = (title or "").strip() or FALLBACK_SEED
        return generate_unique_slug(seed, is_taken, owner)
    if operation is WriteOperation.UPDATE and requested == (old_slug or ""):
        return requested
    return generate_unique_slug(requested, is_taken, owner)


def slug_checker(rows: Iterable[Tuple[str, Optional[str]]]) -> SlugChecker:
    """Build an is_taken predicate over an in-memory (slug, owner) snapshot."""
    owners: dict[str, set] = {}
    for slug, owner in rows:
        owners.setdefault(slug, set()).add(owner)

    def _is_taken(candidate: str, excluded_owner: Optional[str]) -> bool:
        holders = owners.get(candidate)
        if not holders:
            return False
        if excluded_owner is None:
            return True
        return any(holder != excluded_owner for holder in holders)

    return _is_taken
