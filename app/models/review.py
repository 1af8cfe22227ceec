from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Review(SQLModel, table=True):
    """Customer review; only published reviews are shown on the storefront."""

    __tablename__ = "reviews"

    id: int | None = Field(default=None, primary_key=True)

    product_id: int = Field(foreign_key="products.id", index=True)
    user_id: int | None = Field(default=None, foreign_key="users.id")
    order_id: int | None = Field(default=None, foreign_key="orders.id")

    rating: int = Field(ge=1, le=5)
    title: str | None = None
    comment: str | None = None

    reviewer_name: str
    reviewer_email: str

    is_verified_purchase: bool = Field(default=False)
    is_published: bool = Field(default=True, index=True)
    admin_reply: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
