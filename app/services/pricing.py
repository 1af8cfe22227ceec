# app/services/pricing.py
"""
Cart / order totals.

    subtotal = sum(price * quantity)
    tax      = subtotal * TAX_RATE, rounded half-up to whole yen
    shipping = 0 if subtotal > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_FEE
    total    = subtotal + tax + shipping - discount

Recomputed from scratch on every cart read/write and once at checkout.
An empty cart has no shipping charge.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol

# Fixed consumption tax rate (10%)
TAX_RATE = Decimal("0.10")

# Free shipping strictly above ¥10,000
FREE_SHIPPING_THRESHOLD = 10000
FLAT_SHIPPING_FEE = 800


class PricedLine(Protocol):
    price: float
    quantity: int


@dataclass(frozen=True)
class CartTotals:
    subtotal: float
    tax: float
    shipping: float
    discount: float
    total: float
    item_count: int


def tax_for(subtotal: float) -> float:
    # half-up, so 2.5 yen becomes 3 rather than 2
    tax = Decimal(str(subtotal)) * TAX_RATE
    return float(tax.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def shipping_for(subtotal: float) -> float:
    return 0 if subtotal > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_FEE


def compute_totals(lines: Iterable[PricedLine], discount: float = 0) -> CartTotals:
    lines = list(lines)
    if not lines:
        return CartTotals(
            subtotal=0, tax=0, shipping=0, discount=0, total=0, item_count=0
        )

    subtotal = sum(line.price * line.quantity for line in lines)
    tax = tax_for(subtotal)
    shipping = shipping_for(subtotal)
    total = subtotal + tax + shipping - discount
    item_count = sum(line.quantity for line in lines)

    return CartTotals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        discount=discount,
        total=total,
        item_count=item_count,
    )
