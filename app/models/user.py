from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Customer or staff account.

    Role:
      - "customer" | "manager" | "admin"
      - guests are represented by the absence of a token.

    Accounts are never hard-deleted; admins toggle `is_active` instead.
    OAuth-created accounts carry an empty `password_hash`.
    """

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)

    email: str = Field(
        unique=True,
        index=True,
        description="Login identifier",
    )

    password_hash: str = Field(
        default="",
        description="'<salt>$<sha256>' or empty for OAuth accounts",
    )

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=32)

    role: str = Field(
        default="customer",
        index=True,
        description="Application role: customer | manager | admin",
    )

    is_active: bool = Field(default=True)
    email_verified: bool = Field(default=False)

    # en | jp
    language_preference: str = Field(default="en")

    last_login_at: datetime | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
