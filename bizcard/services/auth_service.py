"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError

from bizcard.core.security import hash_password, needs_rehash, verify_password
from bizcard.repositories.sql_repository import SQLRepository
from bizcard.services.session_service import delete_session, issue_session

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8


class AuthError(Exception):
    """Base class for authentication-related exceptions."""


class RegistrationError(AuthError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccountExistsError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


@dataclass
class AuthResult:
    user_id: str
    email: str
    session_token: str
    card_slug: Optional[str]


@dataclass
class AuthService:
    """Handles registration, login and logout."""

    def __post_init__(self):
        self.repository = SQLRepository()

    def _normalize_email(self, email: str | None) -> str:
        return (email or "").strip().lower()

    def _card_slug(self, user_id: str) -> Optional[str]:
        card = self.repository.get_card_by_owner(user_id)
        return card.slug if card else None

    def register(self, email: str, password: str, name: str | None = None) -> AuthResult:
        email = self._normalize_email(email)
        if not EMAIL_RE.match(email):
            raise RegistrationError("Invalid e-mail address.")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise RegistrationError(f"Password must have at least {MIN_PASSWORD_LENGTH} characters.")
        if self.repository.get_user_by_email(email):
            raise AccountExistsError(email)
        try:
            user = self.repository.create_user(email, hash_password(password), name=(name or "").strip() or None)
        except IntegrityError as exc:
            raise AccountExistsError(email) from exc
        logger.info("Registered user %s", user.id)
        token = issue_session(user.id)
        return AuthResult(user_id=user.id, email=email, session_token=token, card_slug=None)

    def login(self, email: str, password: str) -> AuthResult:
        email = self._normalize_email(email)
        user = self.repository.get_user_by_email(email)
        if not user or not verify_password(password or "", user.password_hash):
            raise InvalidCredentialsError(email)
        if needs_rehash(user.password_hash):
            self.repository.update_user_password(user.id, hash_password(password))
        token = issue_session(user.id)
        return AuthResult(user_id=user.id, email=email, session_token=token, card_slug=self._card_slug(user.id))

    def logout(self, token: str | None) -> None:
        delete_session(token)
