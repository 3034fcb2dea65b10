"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Access tokens arrive as "Authorization: Bearer <token>". A verified token
becomes an explicit Principal that route handlers receive as a parameter;
nothing is stashed in a request-global security context.

Principals are built from the token's signed claims alone. The store is not
consulted, which is what makes access tokens stateless: a logged-out user's
access token keeps working until it expires.

get_current_principal() raises Unauthenticated or InvalidToken on failure.

Layer rule: may import fastapi (this module is part of the FastAPI dependency
injection system). No imports from api/ or company/.
"""

from __future__ import annotations

from fastapi import Request

from auth.errors import Unauthenticated
from auth.models import Principal
from auth.session import SessionManager
from auth.tokens import TokenCodec, TokenKind


def get_session_manager(request: Request) -> SessionManager:
    """Return the SessionManager wired into app.state by the lifespan."""
    return request.app.state.session_manager


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


def _principal_from_token(codec: TokenCodec, token: str) -> Principal:
    verified = codec.verify(token, TokenKind.access)
    claims = verified.claims
    return Principal(email=verified.subject, user_id=claims.get("id"), role=claims.get("role"))


def get_current_principal(request: Request) -> Principal:
    """Require a valid access token.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(principal: Principal = Depends(get_current_principal)): ...

    No header -> Unauthenticated (401). A header with a bad, expired or
    refresh-kind token -> InvalidToken (401).
    """
    token = _bearer_token(request)
    if token is None:
        raise Unauthenticated()
    return _principal_from_token(get_session_manager(request).codec, token)
