from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.order import OrderRead

# App-level roles. "guest" = no token, so we don't store it here.
Role = Literal["customer", "manager", "admin"]
LanguagePreference = Literal["en", "jp"]

MIN_PASSWORD_LENGTH = 6


class UserRegister(SQLModel):
    """
    Payload for email/password registration.

    Validation rules:
      - email must be a valid EmailStr
      - password at least 6 characters
      - first/last name cannot be empty or whitespace
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    phone: str | None = Field(default=None, max_length=32)
    language_preference: LanguagePreference = "en"

    @field_validator("first_name", "last_name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        return v


class UserLogin(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str


class AdminLogin(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str


class GoogleUserInfo(SQLModel):
    """Profile fields forwarded by the Google sign-in client."""

    email: EmailStr
    name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture: str | None = None


class GoogleLogin(SQLModel):
    token: str
    user_info: GoogleUserInfo

    @field_validator("token")
    @classmethod
    def token_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("token cannot be empty")
        return v


class AuthUser(SQLModel):
    """Public identity returned to clients."""

    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: Role
    language_preference: LanguagePreference
    avatar: str | None = None


class AuthResult(SQLModel):
    user: AuthUser
    token: str


# -------- Admin --------


class AdminUserRead(SQLModel):
    """User row (minus credentials) with order aggregates."""

    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    role: Role
    is_active: bool
    email_verified: bool
    language_preference: str
    last_login_at: datetime | None = None
    order_count: int = 0
    total_spent: float = 0.0
    last_order_date: datetime | None = None
    created_at: datetime


class AdminUserDetail(AdminUserRead):
    recent_orders: list[OrderRead] = []


class UserStatusUpdate(SQLModel):
    """
    Admin-only activation toggle.
    """

    model_config = ConfigDict(extra="forbid")

    is_active: bool
