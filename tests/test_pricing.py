import math
from dataclasses import dataclass

import pytest

from app.services.pricing import (
    FLAT_SHIPPING_FEE,
    FREE_SHIPPING_THRESHOLD,
    compute_totals,
    shipping_for,
    tax_for,
)


@dataclass
class Line:
    price: float
    quantity: int


def test_at_threshold_pays_shipping():
    totals = compute_totals([Line(5000, 2)])
    assert totals.subtotal == 10000
    assert totals.tax == 1000
    assert totals.shipping == 800
    assert totals.discount == 0
    assert totals.total == 11800
    assert totals.item_count == 2


def test_above_threshold_ships_free():
    totals = compute_totals([Line(6000, 2)])
    assert totals.subtotal == 12000
    assert totals.tax == 1200
    assert totals.shipping == 0
    assert totals.total == 13200


def test_empty_cart_is_all_zero():
    totals = compute_totals([])
    assert (totals.subtotal, totals.tax, totals.shipping, totals.total, totals.item_count) == (
        0,
        0,
        0,
        0,
        0,
    )


def test_tax_is_rounded_to_whole_yen():
    totals = compute_totals([Line(1234, 1)])
    assert totals.tax == 123
    assert totals.total == 1234 + 123 + 800


@pytest.mark.parametrize(
    "subtotal, tax",
    [(5, 1), (15, 2), (25, 3), (1235, 124), (1234.9, 123), (4, 0)],
)
def test_tax_rounds_half_up(subtotal, tax):
    assert tax_for(subtotal) == tax


def test_half_yen_tax_rounds_up_in_cart_totals():
    totals = compute_totals([Line(5, 5)])
    assert totals.tax == 3
    assert totals.total == 25 + 3 + 800


@pytest.mark.parametrize(
    "lines",
    [
        [Line(100, 1)],
        [Line(980, 3), Line(4500, 1)],
        [Line(9999, 1)],
        [Line(10001, 1)],
        [Line(2500, 2), Line(2500, 2), Line(1, 1)],
        [Line(45800, 1), Line(12800, 4)],
    ],
)
def test_totals_identity(lines):
    totals = compute_totals(lines)
    subtotal = sum(line.price * line.quantity for line in lines)
    assert totals.subtotal == subtotal
    assert totals.tax == math.floor(subtotal / 10 + 0.5)
    assert totals.shipping == (0 if subtotal > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_FEE)
    assert totals.total == totals.subtotal + totals.tax + totals.shipping - totals.discount
    assert totals.item_count == sum(line.quantity for line in lines)


def test_shipping_boundary():
    assert shipping_for(10000) == 800
    assert shipping_for(10000.5) == 0
