from datetime import datetime

from pydantic import BaseModel, ConfigDict
from sqlmodel import SQLModel, Field


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: int
    variant_id: int | None = None
    quantity: int = Field(default=1, ge=1)


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item. 0 removes the line.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(ge=0)


class CartItemRead(SQLModel):
    """
    Read model for a single cart line, including line_total.

    `price` is the unit price captured at add time.
    """

    id: int
    product_id: int
    product_variant_id: int | None = None
    quantity: int
    price: float
    line_total: float
    sku: str | None = None
    name: str | None = None
    name_en: str | None = None
    name_jp: str | None = None
    variant_name: str | None = None
    image_url: str | None = None
    inventory_quantity: int | None = None
    created_at: datetime


class CartSummary(SQLModel):
    """
    Full cart with totals, recomputed on every read.
    """

    items: list[CartItemRead]
    subtotal: float
    tax: float
    shipping: float
    discount: float
    total: float
    item_count: int


class CartResponse(BaseModel):
    """
    Cart envelope: the session token is echoed so the client can persist it.
    """

    success: bool = True
    data: CartSummary
    message: str | None = None
    sessionToken: str
