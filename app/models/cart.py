from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class ShoppingSession(SQLModel, table=True):
    """
    Opaque token correlating an (anonymous or authenticated) cart.

    Created lazily on the first cart write. Expiry is fixed at creation;
    expired rows are ignored by lookups, never renewed.
    """

    __tablename__ = "shopping_sessions"

    id: int | None = Field(default=None, primary_key=True)

    session_token: str = Field(
        max_length=128,
        unique=True,
        index=True,
    )

    user_id: int | None = Field(default=None, foreign_key="users.id", index=True)

    expires_at: datetime = Field(index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class CartItem(SQLModel, table=True):
    """
    One product/variant line inside a shopping session.

    `price` is captured when the line is added and never re-derived from
    the catalog.
    """

    __tablename__ = "cart_items"

    id: int | None = Field(default=None, primary_key=True)

    session_id: int = Field(
        foreign_key="shopping_sessions.id",
        index=True,
    )

    product_id: int = Field(
        foreign_key="products.id",
        index=True,
    )

    product_variant_id: int | None = Field(
        default=None,
        foreign_key="product_variants.id",
    )

    quantity: int = Field(
        gt=0,
        description="Must be >= 1",
    )

    price: float = Field(
        description="Unit price when added to cart",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
