"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class. User is the mutable record the store reads and writes;
UserSnapshot is the immutable, password-free view that leaves the auth
layer (embedded in tokens, returned to routes). One snapshot type serves every
response shape -- the API models derive their fields from it.

Layer rule: no imports from api/ or company/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    refresh_token holds the single live refresh token for this user, or None
    when no session is active. Storing a new value (or None) invalidates every
    previously issued refresh token.
    """

    email: str
    name: str
    id: int | None = None
    hashed_password: str | None = None
    role: str = "user"
    refresh_token: str | None = None
    age: int | None = None
    gender: str | None = None  # "MALE", "FEMALE", "OTHER"
    address: str | None = None
    company_id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class UserSnapshot:
    """Read-only copy of a User without the password hash or refresh token."""

    id: int
    email: str
    name: str
    role: str
    age: int | None = None
    gender: str | None = None
    address: str | None = None
    company_id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_user(cls, user: User) -> UserSnapshot:
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            age=user.age,
            gender=user.gender,
            address=user.address,
            company_id=user.company_id,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def token_claims(self) -> dict:
        """The identity fields carried inside access and refresh tokens."""
        return {"id": self.id, "email": self.email, "name": self.name, "role": self.role}


@dataclass(frozen=True)
class Principal:
    """The caller identified by a verified access token.

    Produced by auth.dependencies.get_current_principal and passed explicitly
    into whatever needs to know who is calling.
    """

    email: str
    user_id: int | None = None
    role: str | None = None
