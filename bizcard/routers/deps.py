from __future__ import annotations

from fastapi import HTTPException, Request

from bizcard.services.session_service import current_user_id


def require_user(request: Request) -> str:
    """Dependency returning the logged-in user id or failing with 401."""
    user_id = current_user_id(request)
    if not user_id:
        raise HTTPException(401, "Authentication required")
    return user_id


def templates(request: Request):
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")
