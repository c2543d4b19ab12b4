"""
Product lookup — one SELECT for the whole cart.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront._types import ProductId
from storefront.checkout import ProductSnapshot
from storefront.db._tables import ProductTable


class SQLAlchemyProductLookup:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session = session_factory

    async def lookup_active_products(
        self, ids: Sequence[ProductId]
    ) -> list[ProductSnapshot]:
        if not ids:
            return []

        stmt = select(ProductTable.id, ProductTable.price_cents, ProductTable.stock).where(
            ProductTable.id.in_(set(ids)),
            ProductTable.is_active.is_(True),
        )

        async with self._session() as session:
            rows = (await session.execute(stmt)).all()

        return [ProductSnapshot(id=r.id, price_cents=r.price_cents, stock=r.stock) for r in rows]


__all__ = ("SQLAlchemyProductLookup",)
