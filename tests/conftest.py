"""
Shared fixtures: a temp-file SQLite database and services over it.

A file (not :memory:) so each session gets its own connection and
concurrent checkouts really contend on the database lock.
"""

from datetime import timedelta

import pytest
import pytest_asyncio

from storefront.checkout import CheckoutService, MemoryShop
from storefront.config import Settings
from storefront.db import open_database
from storefront.orders import OrderHistory


@pytest_asyncio.fixture
async def database(tmp_path):
    settings = (
        Settings()
        .with_database(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}")
        .with_tx_timeout(delta=timedelta(seconds=10))
    )
    db = await open_database(settings)
    yield db
    await db.close()


@pytest_asyncio.fixture
async def seeded(database):
    """Products 1..4: A (stock 5), B (stock 10), C (stock 1), D (inactive)."""
    await database.add_product(1, name="A", price_cents=1000, stock=5)
    await database.add_product(2, name="B", price_cents=250, stock=10)
    await database.add_product(3, name="C", price_cents=4999, stock=1)
    await database.add_product(4, name="D", price_cents=100, stock=50, is_active=False)
    return database


@pytest.fixture
def service(seeded):
    return CheckoutService(catalog=seeded.catalog, runner=seeded.runner, orders=seeded.orders)


@pytest.fixture
def history(seeded):
    return OrderHistory(seeded.orders)


@pytest.fixture
def shop():
    return (
        MemoryShop()
        .with_product(1, price_cents=1000, stock=5)
        .with_product(2, price_cents=250, stock=10)
        .with_product(3, price_cents=4999, stock=1)
        .with_product(4, price_cents=100, stock=50, is_active=False)
    )


@pytest.fixture
def memory_service(shop):
    return CheckoutService(catalog=shop, runner=shop, orders=shop)
