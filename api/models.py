"""
API request and response models for JobHunter REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py and
company/models.py, which own the internal domain representation.

Every user-shaped response is derived from the one auth.models.UserSnapshot
value type through a from_snapshot() factory; the models below only decide
which of its fields each endpoint exposes.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import UserSnapshot
from auth.session import Profile
from company.models import Company
from core.pagination import PageMeta


def _strip(value):
    return value.strip() if isinstance(value, str) else value


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class GenderEnum(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


# ---------------------------------------------------------------------------
# Auth -- requests
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login. username is the account email."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)

    # Passwords are compared byte for byte, surrounding spaces included.
    _strip_username = field_validator("username", mode="before")(_strip)


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register and POST /api/v1/users."""

    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=1, max_length=72)
    name: str = Field(min_length=1, max_length=255)
    age: Optional[int] = Field(default=None, ge=0, le=150)
    gender: Optional[GenderEnum] = None
    address: Optional[str] = Field(default=None, max_length=255)
    company_id: Optional[int] = None

    _strip_text = field_validator("email", "name", "address", mode="before")(_strip)

    def to_profile(self) -> Profile:
        return Profile(
            name=self.name,
            age=self.age,
            gender=self.gender.value if self.gender else None,
            address=self.address,
            company_id=self.company_id,
        )


class UserUpdate(BaseModel):
    """Request body for PUT /api/v1/users/{id}. Omitted fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    age: Optional[int] = Field(default=None, ge=0, le=150)
    gender: Optional[GenderEnum] = None
    address: Optional[str] = Field(default=None, max_length=255)
    company_id: Optional[int] = None


# ---------------------------------------------------------------------------
# Auth -- responses
# ---------------------------------------------------------------------------


class UserLogin(BaseModel):
    """The identity block returned by login and refresh."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    name: str
    role: str

    @classmethod
    def from_snapshot(cls, user: UserSnapshot) -> "UserLogin":
        return cls(**user.token_claims())


class LoginResponse(BaseModel):
    """Response body for login and refresh. The refresh token travels only in the cookie."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserLogin


class AccountUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    name: str


class AccountResponse(BaseModel):
    """Response for GET /api/v1/auth/account."""

    model_config = ConfigDict(frozen=True)

    user: AccountUser

    @classmethod
    def from_snapshot(cls, user: UserSnapshot) -> "AccountResponse":
        return cls(user=AccountUser(id=user.id, email=user.email, name=user.name))


class UserResponse(BaseModel):
    """Full user view for registration, the /users routes and listings. Never includes the hash."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    name: str
    role: str
    age: Optional[int] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    company_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_snapshot(cls, user: UserSnapshot) -> "UserResponse":
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


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


class Meta(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int
    page_size: int
    pages: int
    total: int

    @classmethod
    def from_page_meta(cls, meta: PageMeta) -> "Meta":
        return cls(page=meta.page, page_size=meta.page_size, pages=meta.pages, total=meta.total)


class UserPage(BaseModel):
    model_config = ConfigDict(frozen=True)

    meta: Meta
    result: list[UserResponse]


# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------


class CompanyCreate(BaseModel):
    """Request body for POST /api/v1/companies."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    address: Optional[str] = Field(default=None, max_length=255)
    logo: Optional[str] = Field(default=None, max_length=255)


class CompanyUpdate(BaseModel):
    """Request body for PUT /api/v1/companies/{id}. Omitted fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    address: Optional[str] = Field(default=None, max_length=255)
    logo: Optional[str] = Field(default=None, max_length=255)


class CompanyResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    logo: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None

    @classmethod
    def from_company(cls, company: Company) -> "CompanyResponse":
        return cls(
            id=company.id,
            name=company.name,
            description=company.description,
            address=company.address,
            logo=company.logo,
            created_at=company.created_at,
            updated_at=company.updated_at,
        )


class CompanyPage(BaseModel):
    model_config = ConfigDict(frozen=True)

    meta: Meta
    result: list[CompanyResponse]


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
