from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

ProductStatus = Literal["active", "draft", "archived"]
SortField = Literal["price", "name", "created_at", "inventory_quantity"]
SortOrder = Literal["asc", "desc"]


# -------- Storefront read models --------


class CategoryRead(SQLModel):
    """Category with its localized name and active product count."""

    id: int
    slug: str
    name: str
    name_en: str
    name_jp: str
    description: str | None = None
    image_url: str | None = None
    parent_id: int | None = None
    sort_order: int
    product_count: int = 0


class BrandRead(SQLModel):
    id: int
    name: str
    logo_url: str | None = None
    website_url: str | None = None
    description: str | None = None
    product_count: int = 0


class ProductImageRead(SQLModel):
    id: int
    image_url: str
    alt_text: str | None = None
    sort_order: int
    is_primary: bool


class ProductVariantRead(SQLModel):
    id: int
    sku: str
    name: str
    name_en: str
    name_jp: str
    price: float
    compare_price: float | None = None
    inventory_quantity: int
    image_url: str | None = None
    sort_order: int


class ProductRead(SQLModel):
    """
    Product card for listings.

    `name` / `short_description` are resolved for the request language;
    the raw per-language names are kept for clients that switch locally.
    """

    id: int
    sku: str
    name: str
    name_en: str
    name_jp: str
    short_description: str | None = None
    price: float
    compare_price: float | None = None
    inventory_quantity: int
    in_stock: bool
    is_featured: bool
    status: str
    category_id: int
    category_name: str | None = None
    category_slug: str | None = None
    brand_id: int | None = None
    brand_name: str | None = None
    primary_image: str | None = None
    created_at: datetime


class ProductDetail(ProductRead):
    """Full product page: description, specs, gallery and variants."""

    description: str | None = None
    specifications: dict[str, Any] = {}
    weight: float | None = None
    images: list[ProductImageRead] = []
    variants: list[ProductVariantRead] = []


class ReviewRead(SQLModel):
    id: int
    product_id: int
    rating: int
    title: str | None = None
    comment: str | None = None
    reviewer_name: str
    is_verified_purchase: bool
    admin_reply: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    created_at: datetime


class ProductFilters(SQLModel):
    """
    Storefront listing filters. Every field is optional; only the
    provided ones become WHERE clauses.
    """

    category: str | None = None  # category slug
    brand: str | None = None  # brand name
    min_price: float | None = None
    max_price: float | None = None
    in_stock: bool = False
    featured: bool = False
    search: str | None = None


# -------- Admin payloads --------


class ProductCreate(SQLModel):
    """
    Payload for creating a product (admin).

    Unknown keys are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    sku: str = Field(max_length=64)
    name_en: str = Field(max_length=255)
    name_jp: str = Field(max_length=255)
    description_en: str | None = None
    description_jp: str | None = None
    short_description_en: str | None = None
    short_description_jp: str | None = None
    specifications: dict[str, Any] | None = None
    price: float = Field(gt=0)
    compare_price: float | None = Field(default=None, gt=0)
    cost: float | None = Field(default=None, ge=0)
    inventory_quantity: int = Field(default=0, ge=0)
    inventory_policy: Literal["deny", "continue"] = "deny"
    weight: float | None = Field(default=None, ge=0)
    category_id: int
    brand_id: int | None = None
    status: ProductStatus = "active"
    is_featured: bool = False

    @field_validator("sku", "name_en", "name_jp")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductUpdate(SQLModel):
    """
    Partial update payload for products (admin).

    Only the fields listed here may be changed; unknown keys are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    sku: str | None = Field(default=None, max_length=64)
    name_en: str | None = Field(default=None, max_length=255)
    name_jp: str | None = Field(default=None, max_length=255)
    description_en: str | None = None
    description_jp: str | None = None
    short_description_en: str | None = None
    short_description_jp: str | None = None
    specifications: dict[str, Any] | None = None
    price: float | None = Field(default=None, gt=0)
    compare_price: float | None = Field(default=None, gt=0)
    cost: float | None = Field(default=None, ge=0)
    inventory_quantity: int | None = Field(default=None, ge=0)
    inventory_policy: Literal["deny", "continue"] | None = None
    weight: float | None = Field(default=None, ge=0)
    category_id: int | None = None
    brand_id: int | None = None
    status: ProductStatus | None = None
    is_featured: bool | None = None

    @field_validator("sku", "name_en", "name_jp")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class AdminProductRead(SQLModel):
    """Raw product row plus sales counters for the admin panel."""

    id: int
    sku: str
    name_en: str
    name_jp: str
    description_en: str | None = None
    description_jp: str | None = None
    short_description_en: str | None = None
    short_description_jp: str | None = None
    specifications: dict[str, Any] = {}
    price: float
    compare_price: float | None = None
    cost: float | None = None
    inventory_quantity: int
    inventory_policy: str
    weight: float | None = None
    category_id: int
    brand_id: int | None = None
    status: str
    is_featured: bool
    total_orders: int = 0
    total_sold: int = 0
    created_at: datetime
    updated_at: datetime
