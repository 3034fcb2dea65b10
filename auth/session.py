"""
auth/session.py -- Login, refresh-token rotation, logout and registration.

SessionManager holds no state of its own. Everything durable lives in the
credential store, and User.refresh_token there is the single source of truth
for "is this refresh token still live":

  login    -- verify the password, mint an access + refresh pair, store the
              refresh token on the user (overwriting any previous one).
  refresh  -- verify the presented refresh token (signature, expiry, kind),
              then require it to equal the stored value for its subject.
              On success mint a new pair and store the new refresh token, so
              the presented one can never be used again.
  logout   -- store NULL as the refresh token. Access tokens already issued
              stay valid until they expire; there is no blacklist.
  register -- hash the password and insert the account.

Rotation makes a stolen refresh token single-use: whichever of the thief and
the legitimate client refreshes second presents a token that no longer matches
and gets RevokedToken.

Concurrency: the read-then-write in refresh() is not atomic. Two requests
carrying the same valid token can both pass the match check before either
write lands; both get a working pair, and only the last write survives in the
store. This is accepted behavior.

Store failures are never caught here. They reach the caller as
StoreUnavailable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from auth.errors import AuthenticationFailed, DuplicateEmail, MissingToken, RevokedToken, Unauthenticated
from auth.models import User, UserSnapshot
from auth.passwords import burn_verification, hash_password, verify_password
from auth.store import UserStore
from auth.tokens import TokenCodec, TokenKind

logger = logging.getLogger("jobhunter.auth")


@dataclass(frozen=True)
class SessionTokens:
    """Result of a successful login or refresh."""

    access_token: str
    refresh_token: str
    user: UserSnapshot


@dataclass(frozen=True)
class Profile:
    """Optional account fields supplied at registration."""

    name: str
    role: str = "user"
    age: int | None = None
    gender: str | None = None
    address: str | None = None
    company_id: int | None = None


class SessionManager:
    def __init__(
        self,
        store: UserStore,
        codec: TokenCodec,
        access_ttl_seconds: int,
        refresh_ttl_seconds: int,
    ) -> None:
        self.store = store
        self.codec = codec
        self.access_ttl_seconds = access_ttl_seconds
        self.refresh_ttl_seconds = refresh_ttl_seconds

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def login(self, username: str, password: str) -> SessionTokens:
        """Authenticate an email/password pair and open a session.

        Raises AuthenticationFailed for an unknown email and for a wrong
        password alike. bcrypt runs in both cases so timing does not tell
        them apart.
        """
        if not username or not password:
            raise AuthenticationFailed()

        user = self.store.find_by_email(username)
        if user is None or not user.hashed_password:
            burn_verification(password)
            logger.info("Login failed")
            raise AuthenticationFailed()
        if not verify_password(password, user.hashed_password):
            logger.info("Login failed for user id=%s", user.id)
            raise AuthenticationFailed()

        tokens = self._open_session(user)
        logger.info("Login succeeded for user id=%s", user.id)
        return tokens

    def refresh(self, refresh_token: str | None) -> SessionTokens:
        """Exchange a live refresh token for a new access + refresh pair.

        Check order: token present, then signature/expiry/kind, then exact
        match against the stored token for the token's subject.
        """
        if not refresh_token:
            raise MissingToken()

        verified = self.codec.verify(refresh_token, TokenKind.refresh)
        email = verified.subject

        user = self.store.find_by_refresh_token_and_email(refresh_token, email)
        if user is None:
            logger.warning("Rejected refresh with a rotated or revoked token (jti=%s)", verified.token_id)
            raise RevokedToken()

        tokens = self._open_session(user)
        logger.info("Rotated refresh token for user id=%s", user.id)
        return tokens

    def logout(self, email: str) -> None:
        """Revoke the refresh token of `email`. Safe to call repeatedly."""
        if not email:
            raise Unauthenticated()

        user = self.store.find_by_email(email)
        if user is None:
            return
        if user.refresh_token is not None:
            user.refresh_token = None
            self.store.save(user)
        logger.info("Logged out user id=%s", user.id)

    def register(self, email: str, password: str, profile: Profile) -> UserSnapshot:
        """Create an account. The store only ever sees the bcrypt hash."""
        if self.store.exists_by_email(email):
            raise DuplicateEmail()

        user = User(
            email=email,
            name=profile.name,
            hashed_password=hash_password(password),
            role=profile.role,
            age=profile.age,
            gender=profile.gender,
            address=profile.address,
            company_id=profile.company_id,
        )
        try:
            saved = self.store.save(user)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same email.
            raise DuplicateEmail() from exc

        logger.info("Registered user id=%s", saved.id)
        return UserSnapshot.from_user(saved)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _open_session(self, user: User) -> SessionTokens:
        """Mint a fresh pair for `user` and make the new refresh token the live one."""
        snapshot = UserSnapshot.from_user(user)
        claims = snapshot.token_claims()
        access_token = self.codec.issue(TokenKind.access, user.email, claims, self.access_ttl_seconds)
        refresh_token = self.codec.issue(TokenKind.refresh, user.email, claims, self.refresh_ttl_seconds)

        user.refresh_token = refresh_token
        self.store.save(user)
        return SessionTokens(access_token=access_token, refresh_token=refresh_token, user=snapshot)
