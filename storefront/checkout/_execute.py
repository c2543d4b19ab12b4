"""
Checkout Transaction Executor — one atomic unit per checkout.

Inside a single transaction:

    1. conditionally decrement stock for every line (ascending product id)
    2. insert the order (status "paid")
    3. insert its items
    4. insert the simulated payment

If any decrement does not apply, the unit raises CheckoutAborted with a
StockConflict and nothing survives. Any other exception rolls back as well
and surfaces as TransactionFailure.
"""

from __future__ import annotations

from dataclasses import dataclass

from kungfu import Result
from combinators import lift as L

from storefront._types import UserId
from storefront.checkout._types import (
    NewOrder,
    OrderItemResult,
    OrderResult,
    OrderStatus,
    PricedCart,
    SIMULATED_PAYMENT,
)
from storefront.checkout._errors import (
    CheckoutAborted,
    CheckoutError,
    abort_reason,
    report_conflict,
)
from storefront.checkout._ports import AtomicRunner, UnitOfWork, UnitOfWorkFn


@dataclass(frozen=True, slots=True)
class IdempotencyTag:
    """Scoped idempotency key + request fingerprint stored with the order."""

    key: str
    fingerprint: str


async def _claim_stock(uow: UnitOfWork, cart: PricedCart) -> None:
    # Fixed lock order across concurrent units
    failed: set[int] = set()
    for line in sorted(cart.lines, key=lambda ln: ln.product_id):
        applied = await uow.decrement_stock(line.product_id, line.quantity)
        if not applied:
            failed.add(line.product_id)

    if failed:
        raise CheckoutAborted(
            report_conflict(ln.product_id for ln in cart.lines if ln.product_id in failed)
        )


def checkout_unit(
    user_id: UserId,
    cart: PricedCart,
    idempotency: IdempotencyTag | None = None,
) -> UnitOfWorkFn[OrderResult]:
    """Build the unit of work for one checkout."""

    async def unit(uow: UnitOfWork) -> OrderResult:
        await _claim_stock(uow, cart)

        placed = await uow.insert_order(
            NewOrder(
                user_id=user_id,
                status=OrderStatus.PAID,
                total_cents=cart.total_cents,
                idempotency_key=idempotency.key if idempotency else None,
                request_fingerprint=idempotency.fingerprint if idempotency else None,
            )
        )
        await uow.insert_order_items(placed.id, cart.lines)
        await uow.insert_payment(placed.id, cart.total_cents, SIMULATED_PAYMENT)

        return OrderResult(
            id=placed.id,
            user_id=user_id,
            status=OrderStatus.PAID,
            total_cents=cart.total_cents,
            created_at=placed.created_at,
            items=tuple(
                OrderItemResult(
                    product_id=ln.product_id,
                    quantity=ln.quantity,
                    unit_price_cents=ln.unit_price_cents,
                    subtotal_cents=ln.subtotal_cents,
                )
                for ln in cart.lines
            ),
        )

    return unit


async def execute_checkout(
    user_id: UserId,
    cart: PricedCart,
    runner: AtomicRunner,
    *,
    idempotency: IdempotencyTag | None = None,
) -> Result[OrderResult, CheckoutError]:
    """
    Persist order, items, payment and stock decrements atomically.

    Returns Ok(OrderResult) on commit. StockConflict when stock ran out
    between validation and commit, TransactionFailure for anything else.
    Cancellation is not caught: it propagates after the unit rolls back.
    """
    unit = checkout_unit(user_id, cart, idempotency)

    return await L.catching_async(
        lambda: runner.run_atomic(unit),
        on_error=lambda e: abort_reason(e, "Checkout transaction failed"),
    )


__all__ = ("IdempotencyTag", "checkout_unit", "execute_checkout")
