"""
auth/tokens.py -- JWT codec and refresh-cookie helpers.

Security design decisions:
  JWT: python-jose with HS256. Every token carries its kind ("access" or
       "refresh") in a signed claim, so an access token can never be replayed
       at the refresh endpoint or vice versa. Both kinds share one signing key;
       the kind claim alone separates them.

  jti: a random UUID4 per token. Two tokens minted for the same user in the
       same second would otherwise be byte-identical, which would defeat
       refresh-token rotation (the "new" token would equal the old one).

  Verification raises InvalidToken on any failure -- bad signature, garbage
       input, expiry, wrong issuer, wrong kind. Callers never see jose errors.

  Refresh cookie: HttpOnly (JS cannot read it), Secure (HTTPS only unless
       SECURE_COOKIES=false), Path=/, Max-Age = refresh token lifetime. Logout
       sends the same cookie with Max-Age=0 so the browser drops it.

Layer rule: no imports from api/ or company/.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from jose import JWTError, jwt

from auth.errors import InvalidToken

REFRESH_COOKIE = "refresh_token"

_ALGORITHM = "HS256"


class TokenKind(str, Enum):
    access = "access"
    refresh = "refresh"


@dataclass(frozen=True)
class VerifiedToken:
    """Decoded contents of a token that passed every check."""

    kind: TokenKind
    subject: str
    claims: dict[str, Any] = field(default_factory=dict)
    issued_at: datetime | None = None
    expires_at: datetime | None = None
    token_id: str | None = None


class TokenCodec:
    """Signs and verifies self-contained expiring tokens.

    Usage:
        codec = TokenCodec(settings.secret_key)
        token = codec.issue(TokenKind.refresh, "a@x.com", {"id": 1}, ttl_seconds=86400)
        verified = codec.verify(token, TokenKind.refresh)
        verified.subject  # "a@x.com"
    """

    def __init__(self, secret_key: str, issuer: str = "jobhunter") -> None:
        self._secret_key = secret_key
        self._issuer = issuer

    def issue(self, kind: TokenKind, subject: str, claims: dict[str, Any], ttl_seconds: int) -> str:
        """Encode a signed token for `subject` that expires `ttl_seconds` from now.

        `claims` is carried verbatim under its own key so it cannot collide
        with the registered JWT claims (sub, exp, iat, ...).
        """
        now = datetime.now(timezone.utc)
        payload = {
            "iss": self._issuer,
            "sub": subject,
            "type": TokenKind(kind).value,
            "iat": now,
            "exp": now + timedelta(seconds=ttl_seconds),
            "jti": uuid.uuid4().hex,
            "claims": claims,
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str, expected_kind: TokenKind) -> VerifiedToken:
        """Decode and check a token. Raises InvalidToken on any failure."""
        if not token:
            raise InvalidToken()
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[_ALGORITHM],
                issuer=self._issuer,
                options={"require_exp": True, "require_sub": True},
            )
        except JWTError as exc:
            # ExpiredSignatureError and JWTClaimsError both subclass JWTError.
            raise InvalidToken() from exc

        if payload.get("type") != TokenKind(expected_kind).value:
            raise InvalidToken("Token kind does not match this endpoint.")
        subject = payload.get("sub")
        if not subject:
            raise InvalidToken()

        return VerifiedToken(
            kind=TokenKind(payload["type"]),
            subject=subject,
            claims=payload.get("claims") or {},
            issued_at=_from_timestamp(payload.get("iat")),
            expires_at=_from_timestamp(payload.get("exp")),
            token_id=payload.get("jti"),
        )


def _from_timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_refresh_cookie(response, token: str, max_age: int, secure: bool = True) -> None:
    """Write the refresh token as an httpOnly cookie on the response.

    max_age matches the refresh token lifetime so cookie and token expire
    together.
    """
    response.set_cookie(
        REFRESH_COOKIE,
        value=token,
        httponly=True,
        secure=secure,
        path="/",
        max_age=max_age,
    )


def clear_refresh_cookie(response, secure: bool = True) -> None:
    """Expire the refresh cookie immediately (Max-Age=0)."""
    response.delete_cookie(REFRESH_COOKIE, path="/", secure=secure, httponly=True)
