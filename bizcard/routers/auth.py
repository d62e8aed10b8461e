from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from bizcard.core.rate_limiter import rate_limit_ip
from bizcard.services.auth_service import (
    AccountExistsError,
    AuthResult,
    AuthService,
    InvalidCredentialsError,
    RegistrationError,
)
from bizcard.services.session_service import (
    SESSION_COOKIE_NAME,
    clear_session_cookie,
    set_session_cookie,
)

router = APIRouter(prefix="/auth", tags=["auth"])
_auth = AuthService()


class RegisterIn(BaseModel):
    email: str
    password: str
    name: str = ""


class LoginIn(BaseModel):
    email: str
    password: str


def _session_response(result: AuthResult, status_code: int = 200) -> JSONResponse:
    response = JSONResponse(
        {"user_id": result.user_id, "email": result.email, "card_slug": result.card_slug},
        status_code=status_code,
    )
    set_session_cookie(response, result.session_token)
    return response


@router.post("/register")
def register(payload: RegisterIn, request: Request):
    rate_limit_ip(request, "auth-register", limit=10, window_seconds=300)
    try:
        result = _auth.register(payload.email, payload.password, payload.name)
    except RegistrationError as exc:
        raise HTTPException(400, exc.message)
    except AccountExistsError:
        raise HTTPException(409, "An account with this e-mail already exists.")
    return _session_response(result, status_code=201)


@router.post("/login")
def login(payload: LoginIn, request: Request):
    rate_limit_ip(request, "auth-login", limit=20, window_seconds=300)
    try:
        result = _auth.login(payload.email, payload.password)
    except InvalidCredentialsError:
        raise HTTPException(401, "Invalid e-mail or password.")
    return _session_response(result)


@router.post("/logout")
def logout(request: Request):
    _auth.logout(request.cookies.get(SESSION_COOKIE_NAME))
    response = JSONResponse({"ok": True})
    clear_session_cookie(response)
    return response
