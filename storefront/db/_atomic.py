"""
Atomic runner — one session, one transaction per unit of work.

    runner = SQLAlchemyAtomicRunner(session_factory, timeout=timedelta(seconds=10))
    order = await runner.run_atomic(unit)

The session commits when the unit returns. Any exception, the timeout and
task cancellation all roll it back before propagating.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import timedelta
from typing import Any, cast

from sqlalchemy import update
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront._types import Cents, OrderId, ProductId, utcnow
from storefront.checkout import NewOrder, PlacedOrder, PricedLine, UnitOfWorkFn
from storefront.db._tables import OrderItemTable, OrderTable, PaymentTable, ProductTable


# ═══════════════════════════════════════════════════════════════════════════════
# Unit of Work
# ═══════════════════════════════════════════════════════════════════════════════


class SqlUnitOfWork:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def decrement_stock(self, product_id: ProductId, quantity: int) -> bool:
        stmt = (
            update(ProductTable)
            .where(
                ProductTable.id == product_id,
                ProductTable.is_active.is_(True),
                ProductTable.stock >= quantity,
            )
            .values(stock=ProductTable.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        result = cast(CursorResult[Any], await self._session.execute(stmt))
        return result.rowcount == 1

    async def insert_order(self, order: NewOrder) -> PlacedOrder:
        row = OrderTable(
            user_id=order.user_id,
            status=order.status.value,
            total_cents=order.total_cents,
            created_at=utcnow(),
            idempotency_key=order.idempotency_key,
            request_fingerprint=order.request_fingerprint,
        )
        self._session.add(row)
        # Flush for the generated id; a duplicate idempotency key fails here
        await self._session.flush()
        return PlacedOrder(id=row.id, created_at=row.created_at)

    async def insert_order_items(
        self, order_id: OrderId, lines: Sequence[PricedLine]
    ) -> None:
        self._session.add_all(
            OrderItemTable(
                order_id=order_id,
                product_id=ln.product_id,
                quantity=ln.quantity,
                unit_price_cents=ln.unit_price_cents,
                subtotal_cents=ln.subtotal_cents,
            )
            for ln in lines
        )

    async def insert_payment(
        self, order_id: OrderId, amount_cents: Cents, method: str
    ) -> None:
        self._session.add(
            PaymentTable(
                order_id=order_id,
                amount_cents=amount_cents,
                method=method,
                created_at=utcnow(),
            )
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Runner
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyAtomicRunner:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        timeout: timedelta,
    ) -> None:
        self._session = session_factory
        self._timeout = timeout

    @property
    def timeout(self) -> timedelta:
        return self._timeout

    async def run_atomic[T](self, work: UnitOfWorkFn[T]) -> T:
        seconds = self._timeout.total_seconds()
        try:
            async with asyncio.timeout(seconds):
                async with self._session() as session, session.begin():
                    return await work(SqlUnitOfWork(session))
        except TimeoutError as exc:
            raise TimeoutError(f"transaction exceeded {seconds:g}s") from exc


__all__ = ("SqlUnitOfWork", "SQLAlchemyAtomicRunner")
