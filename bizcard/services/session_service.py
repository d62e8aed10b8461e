"""Session helpers (issue tokens, cookies, validation)."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import Request, Response

from bizcard.core.config import get_settings
from bizcard.repositories.sql_repository import SQLRepository

SESSION_COOKIE_NAME = "session"

_repo = SQLRepository()


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def issue_session(user_id: str) -> str:
    """Create a new session token and persist it in the SQL store."""
    settings = get_settings()
    ttl = max(60, settings.session_ttl_seconds)
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl)
    return _repo.create_session(user_id, expires_at)


def user_id_for_token(token: str | None) -> str | None:
    if not token:
        return None
    entity = _repo.get_session(token)
    if not entity:
        return None
    if entity.expires_at and _aware(entity.expires_at) < datetime.now(timezone.utc):
        _repo.delete_session(token)
        return None
    return entity.user_id


def current_user_id(request: Request) -> str | None:
    """Return the user id associated with the current session cookie, if any."""
    return user_id_for_token(request.cookies.get(SESSION_COOKIE_NAME))


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    secure_cookie = settings.app_env == "prod"
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        httponly=True,
        secure=secure_cookie,
        samesite="strict",
        max_age=settings.session_ttl_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")


def delete_session(token: str | None) -> None:
    """Remove a session token from the store."""
    if not token:
        return
    _repo.delete_session(token)
