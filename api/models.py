"""
API request and response models for fintrack REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
ledger/models.py, which own the internal domain representation. Route
handlers map between the two.

Auth payloads use camelCase on the wire (firstName, createdAt, isAuthenticated)
because that is what browser clients send and expect. Ledger records keep the
column names (user_id, created_at).
"""

import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth.models import User
from ledger.models import Asset, Category, Expense, Liability

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
    components: dict[str, str]


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SignupRequest(_CamelModel):
    """Request body for POST /api/v1/auth/signup.

    email and password are optional at the schema level so the handler can
    answer "Email and password are required" with a 400, like every other
    credential problem, instead of a generic schema error.
    """

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(_CamelModel):
    """Request body for POST /api/v1/auth/login."""

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)


class UserOut(_CamelModel):
    """Public view of a user. The password digest is never part of it."""

    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            created_at=user.created_at,
        )


class AuthResponse(_CamelModel):
    """Response body for successful login and signup."""

    user: UserOut
    message: str
    success: bool = True


class AlreadyAuthenticatedResponse(AuthResponse):
    """Login/signup answer when the request already carries a valid session."""

    message: str = "Already logged in"
    already_authenticated: bool = True


class VerifyResponse(_CamelModel):
    """Response body for GET /api/v1/auth/verify (both outcomes)."""

    is_authenticated: bool
    user: Optional[UserOut] = None
    success: Optional[bool] = None
    error: Optional[str] = None


class MeResponse(_CamelModel):
    user: UserOut


# ---------------------------------------------------------------------------
# Ledger -- request models
# ---------------------------------------------------------------------------


class ExpenseIn(BaseModel):
    """Request body for POST /expenses and PUT /expenses/{id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    amount: float = Field(gt=0)
    category: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    date: datetime.date


class AssetIn(BaseModel):
    """Request body for POST /assets and PUT /assets/{id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    type: str = Field(min_length=1, max_length=100)
    amount: float = Field(gt=0)
    description: Optional[str] = Field(default=None, max_length=1000)


class LiabilityIn(BaseModel):
    """Request body for POST /liabilities and PUT /liabilities/{id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    amount: float = Field(gt=0)
    description: Optional[str] = Field(default=None, max_length=1000)


class CategoryIn(BaseModel):
    """Request body for POST /categories and PUT /categories/{id}.

    The name is title-cased by the store, so "food & dining" and
    "Food & Dining" are the same category.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    budget: Optional[float] = Field(default=None, gt=0)


# ---------------------------------------------------------------------------
# Ledger -- response models
# ---------------------------------------------------------------------------


class ExpenseOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int
    amount: float
    category: str
    description: Optional[str]
    date: str
    created_at: str

    @classmethod
    def from_expense(cls, e: Expense) -> "ExpenseOut":
        return cls(
            id=e.id,
            user_id=e.user_id,
            amount=e.amount,
            category=e.category,
            description=e.description,
            date=e.date,
            created_at=e.created_at,
        )


class AssetOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int
    name: str
    type: str
    amount: float
    description: Optional[str]
    created_at: str

    @classmethod
    def from_asset(cls, a: Asset) -> "AssetOut":
        return cls(
            id=a.id,
            user_id=a.user_id,
            name=a.name,
            type=a.type,
            amount=a.amount,
            description=a.description,
            created_at=a.created_at,
        )


class LiabilityOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int
    name: str
    amount: float
    description: Optional[str]
    created_at: str

    @classmethod
    def from_liability(cls, li: Liability) -> "LiabilityOut":
        return cls(
            id=li.id,
            user_id=li.user_id,
            name=li.name,
            amount=li.amount,
            description=li.description,
            created_at=li.created_at,
        )


class CategoryOut(BaseModel):
    """One category. id and created_at are None for unsaved (derived/default) entries."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int]
    user_id: int
    name: str
    budget: Optional[float]
    created_at: Optional[str]

    @classmethod
    def from_category(cls, c: Category) -> "CategoryOut":
        return cls(
            id=c.id,
            user_id=c.user_id,
            name=c.name,
            budget=c.budget,
            created_at=c.created_at,
        )
