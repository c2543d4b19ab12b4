"""Atomic execution: all writes or none."""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy import func, select

from storefront.checkout import (
    OrderStatus,
    PricedCart,
    PricedLine,
    StockConflict,
    TransactionFailure,
    execute_checkout,
)
from storefront.db import OrderItemTable, OrderTable, PaymentTable, SQLAlchemyAtomicRunner
from tests._results import ok, err


def _cart(*lines: tuple[int, int, int]) -> PricedCart:
    priced = tuple(PricedLine(pid, qty, price, price * qty) for pid, qty, price in lines)
    return PricedCart(priced, sum(ln.subtotal_cents for ln in priced))


async def _count(db, table) -> int:
    async with db.session_factory() as session:
        return (await session.execute(select(func.count()).select_from(table))).scalar_one()


@pytest.mark.asyncio
async def test_commit_writes_order_items_payment_and_stock(seeded):
    order = ok(await execute_checkout(7, _cart((1, 2, 1000), (2, 1, 250)), seeded.runner))

    assert order.status is OrderStatus.PAID
    assert order.total_cents == 2250
    assert [i.product_id for i in order.items] == [1, 2]
    assert await seeded.stock_of(1) == 3
    assert await seeded.stock_of(2) == 9
    assert await _count(seeded, OrderTable) == 1
    assert await _count(seeded, OrderItemTable) == 2
    assert await _count(seeded, PaymentTable) == 1


@pytest.mark.asyncio
async def test_failed_middle_decrement_rolls_everything_back(seeded):
    # Product 2 has 10, asks 11: the second of three decrements fails
    e = err(await execute_checkout(
        7, _cart((1, 1, 1000), (2, 11, 250), (3, 1, 4999)), seeded.runner
    ))

    assert e == StockConflict((2,))
    assert await seeded.stock_of(1) == 5
    assert await seeded.stock_of(2) == 10
    assert await seeded.stock_of(3) == 1
    assert await _count(seeded, OrderTable) == 0
    assert await _count(seeded, OrderItemTable) == 0
    assert await _count(seeded, PaymentTable) == 0


@pytest.mark.asyncio
async def test_all_short_lines_are_reported_in_cart_order(seeded):
    e = err(await execute_checkout(7, _cart((3, 2, 4999), (1, 9, 1000)), seeded.runner))
    assert e == StockConflict((3, 1))


@pytest.mark.asyncio
async def test_memory_shop_rolls_back_the_same_way(shop):
    e = err(await execute_checkout(7, _cart((1, 1, 1000), (3, 2, 4999)), shop))

    assert e == StockConflict((3,))
    assert shop.stock_of(1) == 5
    assert shop.order_count == 0
    assert shop.payments == []


@pytest.mark.asyncio
async def test_slow_transaction_times_out_and_rolls_back(seeded):
    runner = SQLAlchemyAtomicRunner(seeded.session_factory, timeout=timedelta(milliseconds=50))

    async def slow_unit(uow):
        await uow.decrement_stock(1, 1)
        await asyncio.sleep(1)

    with pytest.raises(TimeoutError):
        await runner.run_atomic(slow_unit)
    assert await seeded.stock_of(1) == 5


@pytest.mark.asyncio
async def test_database_error_becomes_transaction_failure():
    class _Exploding:
        async def run_atomic(self, work):
            raise OSError("disk I/O error")

    e = err(await execute_checkout(7, _cart((1, 1, 1000)), _Exploding()))
    assert isinstance(e, TransactionFailure)
    assert "disk I/O error" in e.message


class _StallOnPayment:
    """Delegates to a real unit of work, then blocks before the payment insert."""

    def __init__(self, uow, reached: asyncio.Event) -> None:
        self._uow = uow
        self._reached = reached

    async def decrement_stock(self, product_id, quantity):
        return await self._uow.decrement_stock(product_id, quantity)

    async def insert_order(self, order):
        return await self._uow.insert_order(order)

    async def insert_order_items(self, order_id, lines):
        await self._uow.insert_order_items(order_id, lines)

    async def insert_payment(self, order_id, amount_cents, method):
        self._reached.set()
        await asyncio.Event().wait()


class _StallingRunner:
    def __init__(self, inner, reached: asyncio.Event) -> None:
        self._inner = inner
        self._reached = reached

    async def run_atomic(self, work):
        return await self._inner.run_atomic(
            lambda uow: work(_StallOnPayment(uow, self._reached))
        )


@pytest.mark.asyncio
async def test_cancelled_checkout_rolls_back_and_propagates(seeded):
    reached = asyncio.Event()
    runner = _StallingRunner(seeded.runner, reached)

    task = asyncio.create_task(
        execute_checkout(7, _cart((1, 2, 1000), (2, 1, 250)), runner)
    )
    await reached.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert await seeded.stock_of(1) == 5
    assert await seeded.stock_of(2) == 10
    assert await _count(seeded, OrderTable) == 0
    assert await _count(seeded, OrderItemTable) == 0
    assert await _count(seeded, PaymentTable) == 0


@pytest.mark.asyncio
async def test_cancelled_checkout_leaves_memory_shop_untouched(shop):
    reached = asyncio.Event()

    task = asyncio.create_task(
        execute_checkout(7, _cart((1, 2, 1000)), _StallingRunner(shop, reached))
    )
    await reached.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert shop.stock_of(1) == 5
    assert shop.order_count == 0
    assert shop.payments == []
