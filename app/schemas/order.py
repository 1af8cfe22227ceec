from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

PaymentMethod = Literal["cod", "credit_card"]
OrderStatus = Literal[
    "pending", "confirmed", "processing", "shipped", "delivered", "cancelled"
]


class Address(SQLModel):
    """
    Shipping or billing address captured at checkout.
    """

    model_config = ConfigDict(extra="forbid")

    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    company: str | None = None
    address1: str
    address2: str | None = None
    city: str
    province: str | None = None
    country: str
    zip: str = Field(max_length=20)
    phone: str | None = None

    @field_validator("first_name", "last_name", "address1", "city", "country", "zip")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class OrderCreate(SQLModel):
    """
    Payload for creating an order from the current cart.

    User provides:
      - email
      - shipping address (billing defaults to it)
      - payment method
      - optional notes
      - session_token (or X-Session-Token header)

    Backend derives:
      - user_id from token (null for guests)
      - status = 'pending', payment_status from payment method
      - totals and items from the cart
    """

    model_config = ConfigDict(extra="forbid")

    session_token: str | None = None
    email: EmailStr
    shipping: Address
    billing: Address | None = None
    payment_method: PaymentMethod
    notes: str | None = None

    @field_validator("notes", mode="before")
    @classmethod
    def normalize_notes(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class OrderItemRead(SQLModel):
    """
    Snapshot of a single order line.
    """

    id: int
    product_id: int
    product_variant_id: int | None = None
    sku: str
    name: str
    quantity: int
    price: float
    total: float


class OrderRead(SQLModel):
    """
    Order without its lines (history listings).
    """

    id: int
    order_number: str
    user_id: int | None = None
    email: str
    status: str
    payment_status: str
    payment_method: str
    shipping_status: str
    subtotal: float
    tax_amount: float
    shipping_amount: float
    discount_amount: float
    total_amount: float
    currency: str
    item_count: int = 0
    created_at: datetime
    updated_at: datetime


class OrderDetail(OrderRead):
    """
    Full order view including address snapshot and items.
    """

    shipping_address: Address | None = None
    billing_address: Address | None = None
    notes: str | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    items: list[OrderItemRead] = []


class OrderProgressUpdate(SQLModel):
    """
    Customer "simulate progress" payload. Omitting `status` advances one step;
    if given it must be the next step.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus | None = None


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to set order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus


class AdminOrderRead(OrderRead):
    """
    Admin listing row: order plus the customer's name (null for guests).
    """

    customer_first_name: str | None = None
    customer_last_name: str | None = None
