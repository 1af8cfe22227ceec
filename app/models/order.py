from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Checkout snapshot.

    Totals and addresses are frozen at creation:
      total_amount == subtotal + tax_amount + shipping_amount - discount_amount
    """

    __tablename__ = "orders"

    id: int | None = Field(default=None, primary_key=True)

    order_number: str = Field(
        max_length=32,
        index=True,
        description="PC + timestamp suffix (not guaranteed unique)",
    )

    # Null for guest checkout
    user_id: int | None = Field(default=None, foreign_key="users.id", index=True)
    email: str

    # pending | confirmed | processing | shipped | delivered | cancelled
    status: str = Field(default="pending", index=True)
    # pending | cod_pending | completed
    payment_status: str = Field(default="pending")
    # cod | credit_card
    payment_method: str
    # pending | shipped | delivered
    shipping_status: str = Field(default="pending")

    subtotal: float
    tax_amount: float
    shipping_amount: float
    discount_amount: float = Field(default=0)
    total_amount: float
    currency: str = Field(default="JPY", max_length=3)

    shipping_first_name: str | None = None
    shipping_last_name: str | None = None
    shipping_company: str | None = None
    shipping_address1: str | None = None
    shipping_address2: str | None = None
    shipping_city: str | None = None
    shipping_province: str | None = None
    shipping_country: str | None = None
    shipping_zip: str | None = None
    shipping_phone: str | None = None

    billing_first_name: str | None = None
    billing_last_name: str | None = None
    billing_company: str | None = None
    billing_address1: str | None = None
    billing_address2: str | None = None
    billing_city: str | None = None
    billing_province: str | None = None
    billing_country: str | None = None
    billing_zip: str | None = None
    billing_phone: str | None = None

    notes: str | None = None

    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class OrderItem(SQLModel, table=True):
    """
    Frozen copy of a cart line.

    sku / name / price are copied, so later catalog edits do not alter
    historical orders.
    """

    __tablename__ = "order_items"

    id: int | None = Field(default=None, primary_key=True)

    order_id: int = Field(
        foreign_key="orders.id",
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

    sku: str
    name: str

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )
    price: float = Field(description="Unit price at time of order (pre-tax)")
    total: float = Field(description="price * quantity")

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
