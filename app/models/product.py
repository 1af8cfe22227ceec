from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Category(SQLModel, table=True):
    """
    Catalog category (CPU, GPU, Motherboards, ...).

    Names and descriptions are stored per language (en / jp).
    """

    __tablename__ = "categories"

    id: int | None = Field(default=None, primary_key=True)

    name_en: str = Field(max_length=100)
    name_jp: str = Field(max_length=100)

    slug: str = Field(
        max_length=100,
        unique=True,
        index=True,
        description="URL-friendly identifier (unique)",
    )

    description_en: str | None = None
    description_jp: str | None = None
    image_url: str | None = None

    parent_id: int | None = Field(default=None, foreign_key="categories.id")

    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Brand(SQLModel, table=True):
    """Manufacturer (AMD, Intel, NVIDIA, ASUS, ...)."""

    __tablename__ = "brands"

    id: int | None = Field(default=None, primary_key=True)

    name: str = Field(max_length=100, unique=True, index=True)
    logo_url: str | None = None
    website_url: str | None = None
    description_en: str | None = None
    description_jp: str | None = None

    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    Inventory is a plain counter: checkout does not reserve or decrement it.
    """

    __tablename__ = "products"

    id: int | None = Field(default=None, primary_key=True)

    sku: str = Field(
        max_length=64,
        unique=True,
        index=True,
        description="Stock keeping unit (unique)",
    )

    name_en: str = Field(max_length=255, index=True)
    name_jp: str = Field(max_length=255)

    description_en: str | None = None
    description_jp: str | None = None
    short_description_en: str | None = None
    short_description_jp: str | None = None

    specifications_json: str | None = Field(
        default=None,
        description="JSON object of technical specifications",
    )

    price: float = Field(gt=0, description="Unit price (JPY)")
    compare_price: float | None = Field(
        default=None,
        description="Original price shown struck-through",
    )
    cost: float | None = None

    inventory_quantity: int = Field(default=0, ge=0)
    inventory_policy: str = Field(default="deny")
    weight: float | None = None

    category_id: int = Field(foreign_key="categories.id", index=True)
    brand_id: int | None = Field(default=None, foreign_key="brands.id", index=True)

    # active | draft | archived
    status: str = Field(default="active", index=True)
    is_featured: bool = Field(default=False, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class ProductImage(SQLModel, table=True):
    """Gallery image for a product; one may be flagged primary."""

    __tablename__ = "product_images"

    id: int | None = Field(default=None, primary_key=True)

    product_id: int = Field(foreign_key="products.id", index=True)

    image_url: str
    alt_text_en: str | None = None
    alt_text_jp: str | None = None

    sort_order: int = Field(default=0, ge=0)
    is_primary: bool = Field(default=False)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class ProductVariant(SQLModel, table=True):
    """
    Independently priced variant of a product (capacity, colour, ...).
    """

    __tablename__ = "product_variants"

    id: int | None = Field(default=None, primary_key=True)

    product_id: int = Field(foreign_key="products.id", index=True)

    sku: str = Field(max_length=64, index=True)
    name_en: str = Field(max_length=255)
    name_jp: str = Field(max_length=255)

    price: float = Field(gt=0)
    compare_price: float | None = None
    inventory_quantity: int = Field(default=0, ge=0)
    weight: float | None = None
    image_url: str | None = None

    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
