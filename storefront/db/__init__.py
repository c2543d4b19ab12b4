"""
SQLAlchemy persistence for checkout.

    from storefront import db as D

    database = await D.open_database(settings)
    database.catalog   # ProductLookup
    database.runner    # AtomicRunner (timeout from settings)
    database.orders    # OrderReader

Tables:

    products ◀── order_items ──▶ orders ◀── payments
    (stock >= 0)                 (idempotency_key unique)
"""

from storefront.db._tables import (
    Base,
    as_utc,
    ProductTable,
    OrderTable,
    OrderItemTable,
    PaymentTable,
)
from storefront.db._setup import create_engine, create_schema, create_database
from storefront.db._catalog import SQLAlchemyProductLookup
from storefront.db._atomic import SqlUnitOfWork, SQLAlchemyAtomicRunner
from storefront.db._orders import SQLAlchemyOrderReader
from storefront.db._database import Database, open_database

__all__ = (
    # Tables
    "Base",
    "as_utc",
    "ProductTable",
    "OrderTable",
    "OrderItemTable",
    "PaymentTable",
    # Setup
    "create_engine",
    "create_schema",
    "create_database",
    # Adapters
    "SQLAlchemyProductLookup",
    "SqlUnitOfWork",
    "SQLAlchemyAtomicRunner",
    "SQLAlchemyOrderReader",
    # Bundle
    "Database",
    "open_database",
)
