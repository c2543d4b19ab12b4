"""
Database bundle — engine plus the adapters built on it.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from storefront._types import Cents, ProductId
from storefront.config import Settings
from storefront.logging_config import get_logger
from storefront.db._setup import create_database
from storefront.db._tables import ProductTable
from storefront.db._catalog import SQLAlchemyProductLookup
from storefront.db._atomic import SQLAlchemyAtomicRunner
from storefront.db._orders import SQLAlchemyOrderReader

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Database:
    """
    Example:
        db = await open_database(Settings.from_env())
        service = CheckoutService(catalog=db.catalog, runner=db.runner, orders=db.orders)
        ...
        await db.close()
    """

    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    catalog: SQLAlchemyProductLookup
    runner: SQLAlchemyAtomicRunner
    orders: SQLAlchemyOrderReader

    async def add_product(
        self,
        product_id: ProductId,
        *,
        name: str,
        price_cents: Cents,
        stock: int,
        is_active: bool = True,
    ) -> None:
        async with self.session_factory() as session, session.begin():
            session.add(
                ProductTable(
                    id=product_id,
                    name=name,
                    price_cents=price_cents,
                    stock=stock,
                    is_active=is_active,
                )
            )

    async def stock_of(self, product_id: ProductId) -> int:
        async with self.session_factory() as session:
            return (
                await session.execute(
                    select(ProductTable.stock).where(ProductTable.id == product_id)
                )
            ).scalar_one()

    async def close(self) -> None:
        await self.engine.dispose()


async def open_database(settings: Settings) -> Database:
    session_factory, engine = await create_database(
        settings.database_url, echo=settings.echo_sql
    )
    log.info(
        "[Database] ready dialect=%s tx_timeout=%ss",
        engine.dialect.name, settings.tx_timeout.total_seconds(),
    )
    return Database(
        engine=engine,
        session_factory=session_factory,
        catalog=SQLAlchemyProductLookup(session_factory),
        runner=SQLAlchemyAtomicRunner(session_factory, timeout=settings.tx_timeout),
        orders=SQLAlchemyOrderReader(session_factory),
    )


__all__ = ("Database", "open_database")
