"""
api/routes/v1/auth.py -- Authentication REST endpoints.

Routes:
  POST /api/v1/auth/login     -- password login; access token in body, refresh token in cookie
  GET  /api/v1/auth/refresh   -- rotate: refresh_token cookie in, new pair out
  POST /api/v1/auth/logout    -- revoke the stored refresh token; expire the cookie
  POST /api/v1/auth/register  -- create an account (public)
  GET  /api/v1/auth/account   -- current user info (requires access token)

These handlers only translate HTTP to SessionManager calls and back. Errors
raised by the session core (auth.errors) propagate to the ServiceError handler
in api/main.py, which renders the status code and error envelope.

Security:
  POST /login is rate-limited per IP (LOGIN_RATE_LIMIT).
  Cache-Control: no-store on every response that carries a token.
  The refresh cookie is HttpOnly + Secure + Path=/ with Max-Age equal to the
  refresh token lifetime; logout re-sends it with Max-Age=0.
"""

from __future__ import annotations

from fastapi import APIRouter, Cookie, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import AccountResponse, LoginRequest, LoginResponse, RegisterRequest, UserLogin, UserResponse
from auth.dependencies import get_current_principal, get_session_manager
from auth.models import Principal, UserSnapshot
from auth.session import SessionManager, SessionTokens
from auth.tokens import REFRESH_COOKIE, clear_refresh_cookie, set_refresh_cookie
from core.config import get_settings

# Auth policy:
# - POST /api/v1/auth/login:     public
# - GET  /api/v1/auth/refresh:   public -- the refresh cookie is the credential
# - POST /api/v1/auth/register:  public
# - POST /api/v1/auth/logout:    requires access token (get_current_principal)
# - GET  /api/v1/auth/account:   requires access token (get_current_principal)
router = APIRouter()


def _login_rate_limit() -> str:
    return get_settings().login_rate_limit


def _session_response(tokens: SessionTokens, manager: SessionManager) -> JSONResponse:
    """Render a login/refresh result: body with the access token, cookie with the refresh token."""
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            access_token=tokens.access_token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=manager.access_ttl_seconds,
            user=UserLogin.from_snapshot(tokens.user),
        ).model_dump(),
    )
    set_refresh_cookie(
        resp,
        tokens.refresh_token,
        max_age=manager.refresh_ttl_seconds,
        secure=get_settings().secure_cookies,
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@limiter.limit(_login_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login", response_model=LoginResponse)
def login(
    request: Request,
    body: LoginRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """Authenticate with email and password.

    Wrong email and wrong password produce the same 401 "bad_credentials".
    """
    tokens = manager.login(body.username, body.password)
    return _session_response(tokens, manager)


@router.get("/auth/refresh", response_model=LoginResponse)
def refresh(
    refresh_token: str | None = Cookie(default=None, alias=REFRESH_COOKIE),
    manager: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """Exchange the refresh_token cookie for a new access + refresh pair.

    No cookie -> 400 missing_token. Bad/expired/wrong-kind token -> 401
    invalid_token. Token that is not the user's current one -> 401
    revoked_token.
    """
    tokens = manager.refresh(refresh_token)
    return _session_response(tokens, manager)


@router.post("/auth/register", response_model=UserResponse, status_code=201)
def register(
    body: RegisterRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> UserResponse:
    """Create an account. 409 duplicate_email if the email is taken."""
    snapshot = manager.register(body.email, body.password, body.to_profile())
    return UserResponse.from_snapshot(snapshot)


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/logout")
def logout(
    principal: Principal = Depends(get_current_principal),
    manager: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """Revoke the caller's refresh token and expire the cookie.

    The access token used for this call stays valid until it expires.
    """
    manager.logout(principal.email)
    resp = JSONResponse(content={"message": "Logged out."})
    clear_refresh_cookie(resp, secure=get_settings().secure_cookies)
    return resp


@router.get("/auth/account", response_model=AccountResponse)
def account(
    principal: Principal = Depends(get_current_principal),
    manager: SessionManager = Depends(get_session_manager),
) -> AccountResponse:
    """Return the stored account of the caller."""
    user = manager.store.find_by_email(principal.email)
    if user is None:
        # Valid token for an account deleted since it was issued.
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Account not found."},
        )
    return AccountResponse.from_snapshot(UserSnapshot.from_user(user))
