"""
Order reads — history and idempotency lookups.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from storefront._types import UserId
from storefront.checkout import OrderItemResult, OrderResult, OrderStatus, StoredOrder
from storefront.db._tables import OrderTable, as_utc


def _to_result(row: OrderTable) -> OrderResult:
    return OrderResult(
        id=row.id,
        user_id=row.user_id,
        status=OrderStatus(row.status),
        total_cents=row.total_cents,
        created_at=as_utc(row.created_at),
        items=tuple(
            OrderItemResult(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price_cents=item.unit_price_cents,
                subtotal_cents=item.subtotal_cents,
            )
            for item in row.items
        ),
    )


class SQLAlchemyOrderReader:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session = session_factory

    async def find_by_idempotency_key(self, key: str) -> StoredOrder | None:
        stmt = (
            select(OrderTable)
            .options(selectinload(OrderTable.items))
            .where(OrderTable.idempotency_key == key)
        )
        async with self._session() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            if row is None:
                return None
            return StoredOrder(order=_to_result(row), request_fingerprint=row.request_fingerprint)

    async def list_for_user(self, user_id: UserId) -> list[OrderResult]:
        stmt = (
            select(OrderTable)
            .options(selectinload(OrderTable.items))
            .where(OrderTable.user_id == user_id)
            .order_by(OrderTable.created_at.desc(), OrderTable.id.desc())
        )
        async with self._session() as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [_to_result(row) for row in rows]


__all__ = ("SQLAlchemyOrderReader",)
