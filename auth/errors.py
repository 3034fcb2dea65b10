"""
auth/errors.py -- Failure taxonomy for the session core.

None of the messages say whether an email address exists. StoreUnavailable
lives in core/errors.py because the company store raises it too; the session
core lets it propagate untouched.
"""

from __future__ import annotations

from core.errors import ServiceError


class AuthError(ServiceError):
    """Base class for every error raised by the session core."""

    code = "auth_error"
    status_code = 400
    message = "Authentication error."


class AuthenticationFailed(AuthError):
    """Wrong password or unknown email. The two cases are indistinguishable."""

    code = "bad_credentials"
    status_code = 401
    message = "Invalid username or password."


class MissingToken(AuthError):
    """No refresh token was presented."""

    code = "missing_token"
    status_code = 400
    message = "No refresh token cookie was sent."


class InvalidToken(AuthError):
    """Bad signature, malformed token, expired, or wrong token kind."""

    code = "invalid_token"
    status_code = 401
    message = "Token is invalid or has expired."


class RevokedToken(AuthError):
    """Well-formed refresh token that no longer matches the stored one."""

    code = "revoked_token"
    status_code = 401
    message = "Refresh token is no longer valid."


class DuplicateEmail(AuthError):
    code = "duplicate_email"
    status_code = 409
    message = "An account with that email already exists."


class Unauthenticated(AuthError):
    code = "unauthorized"
    status_code = 401
    message = "Authentication required."
