"""
Cart Normalizer — merge duplicate lines by product.

Pure, no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from kungfu import Result, Ok, Error

from storefront.checkout._types import CartLineRequest, NormalizedLine
from storefront.checkout._errors import InvalidInput


type RawLine = CartLineRequest | Mapping[str, Any]


def _is_positive_int(value: object) -> bool:
    # bool is an int subclass; True must not pass as product 1
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _read_line(raw: RawLine) -> tuple[object, object]:
    if isinstance(raw, CartLineRequest):
        return raw.product_id, raw.quantity
    if isinstance(raw, Mapping):
        product_id = raw.get("productId", raw.get("product_id"))
        return product_id, raw.get("quantity")
    return None, None


def normalize_cart(
    items: Iterable[RawLine],
) -> Result[tuple[NormalizedLine, ...], InvalidInput]:
    """
    Merge lines with the same product, summing quantities.

    Output keeps first-seen product order. Fails with InvalidInput when the
    cart is empty or any line has a non-positive product id or quantity;
    every bad line is listed in details.

    Example:
        normalize_cart([
            CartLineRequest(1, 2),
            CartLineRequest(1, 3),
            CartLineRequest(2, 1),
        ])
        # Ok((NormalizedLine(1, 5), NormalizedLine(2, 1)))
    """
    lines = list(items)
    if not lines:
        return Error(InvalidInput("Cart is empty", ("items: at least one item is required",)))

    totals: dict[int, int] = {}
    problems: list[str] = []

    for index, raw in enumerate(lines):
        product_id, quantity = _read_line(raw)
        line_ok = True
        if not _is_positive_int(product_id):
            problems.append(f"items[{index}].productId: must be a positive integer")
            line_ok = False
        if not _is_positive_int(quantity):
            problems.append(f"items[{index}].quantity: must be an integer >= 1")
            line_ok = False
        if line_ok:
            pid = int(product_id)  # type: ignore[call-overload]
            totals[pid] = totals.get(pid, 0) + int(quantity)  # type: ignore[call-overload]

    if problems:
        return Error(InvalidInput("Invalid cart payload", tuple(problems)))

    return Ok(tuple(NormalizedLine(pid, qty) for pid, qty in totals.items()))


__all__ = ("RawLine", "normalize_cart")
