"""Pricing and early stock validation."""

import pytest

from storefront.checkout import (
    NormalizedLine,
    ProductSnapshot,
    StockConflict,
    TransactionFailure,
    price_cart,
    price_lines,
)
from tests._results import ok, err


PRODUCTS = [
    ProductSnapshot(id=1, price_cents=1000, stock=5),
    ProductSnapshot(id=2, price_cents=250, stock=10),
    ProductSnapshot(id=3, price_cents=4999, stock=1),
]


def test_prices_come_from_the_catalog():
    cart = ok(price_lines([NormalizedLine(1, 2), NormalizedLine(2, 3)], PRODUCTS))

    assert [(ln.product_id, ln.unit_price_cents, ln.subtotal_cents) for ln in cart.lines] == [
        (1, 1000, 2000),
        (2, 250, 750),
    ]
    assert cart.total_cents == 2750


def test_total_is_sum_of_subtotals():
    cart = ok(price_lines([NormalizedLine(1, 5), NormalizedLine(3, 1)], PRODUCTS))
    assert cart.total_cents == sum(ln.subtotal_cents for ln in cart.lines)


def test_conflict_lists_every_unavailable_product():
    # 3 is short, 9 does not exist, 1 is fine
    e = err(price_lines(
        [NormalizedLine(3, 2), NormalizedLine(1, 1), NormalizedLine(9, 1)],
        PRODUCTS,
    ))
    assert e == StockConflict((3, 9))


@pytest.mark.asyncio
async def test_inactive_products_are_unavailable(shop):
    e = err(await price_cart([NormalizedLine(4, 1), NormalizedLine(2, 1)], shop))
    assert e == StockConflict((4,))


@pytest.mark.asyncio
async def test_catalog_price_wins_over_anything_cached(shop):
    shop.set_price(2, 300)
    cart = ok(await price_cart([NormalizedLine(2, 2)], shop))
    assert cart.lines[0].unit_price_cents == 300
    assert cart.total_cents == 600


class _BrokenCatalog:
    async def lookup_active_products(self, ids):
        raise ConnectionError("catalog down")


@pytest.mark.asyncio
async def test_lookup_failure_is_a_transaction_failure():
    e = err(await price_cart([NormalizedLine(1, 1)], _BrokenCatalog()))
    assert isinstance(e, TransactionFailure)
    assert "catalog down" in e.message
