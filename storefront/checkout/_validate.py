"""
Stock & Pricing Validator — authoritative prices, early stock check.

Note: This check is advisory. Stock can change before commit; the executor
re-checks it with a conditional decrement inside the transaction.
"""

from __future__ import annotations

from collections.abc import Sequence

from kungfu import Result, Ok, Error
from combinators import lift as L

from storefront.checkout._types import NormalizedLine, PricedCart, PricedLine, ProductSnapshot
from storefront.checkout._errors import CheckoutError, TransactionFailure, report_conflict
from storefront.checkout._ports import ProductLookup


def price_lines(
    lines: Sequence[NormalizedLine],
    products: Sequence[ProductSnapshot],
) -> Result[PricedCart, CheckoutError]:
    """
    Price lines against product snapshots.

    Unit price always comes from the snapshot. Missing products and
    insufficient stock are collected for all lines before failing.
    """
    by_id = {p.id: p for p in products}
    unavailable: list[int] = []
    priced: list[PricedLine] = []
    total = 0

    for line in lines:
        product = by_id.get(line.product_id)
        if product is None or product.stock < line.quantity:
            unavailable.append(line.product_id)
            continue
        subtotal = product.price_cents * line.quantity
        total += subtotal
        priced.append(
            PricedLine(
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price_cents=product.price_cents,
                subtotal_cents=subtotal,
            )
        )

    if unavailable:
        return Error(report_conflict(unavailable))

    return Ok(PricedCart(lines=tuple(priced), total_cents=total))


async def price_cart(
    lines: Sequence[NormalizedLine],
    catalog: ProductLookup,
) -> Result[PricedCart, CheckoutError]:
    """Fetch all referenced products in one lookup, then price the cart."""
    ids = [line.product_id for line in lines]

    fetched = await L.catching_async(
        lambda: catalog.lookup_active_products(ids),
        on_error=lambda e: TransactionFailure.from_exception("Product lookup failed", e),
    )

    match fetched:
        case Ok(products):
            return price_lines(lines, products)
        case Error(e):
            return Error(e)


__all__ = ("price_lines", "price_cart")
