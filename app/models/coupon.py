from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Coupon(SQLModel, table=True):
    """
    Discount coupon.

    Persisted for schema completeness only: cart and order totals always
    use discount = 0 and never read this table.
    """

    __tablename__ = "coupons"

    id: int | None = Field(default=None, primary_key=True)

    code: str = Field(max_length=50, unique=True, index=True)
    name_en: str
    name_jp: str

    # percentage | fixed
    type: str
    value: float

    minimum_amount: float = Field(default=0)
    maximum_discount: float | None = None
    usage_limit: int | None = None
    used_count: int = Field(default=0)

    starts_at: datetime | None = None
    expires_at: datetime | None = None
    is_active: bool = Field(default=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
