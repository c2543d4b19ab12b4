"""
storefront — checkout core for an online shop.

    from storefront import checkout as C
    from storefront import db as D

    database = await D.open_database(Settings.from_env())
    service = C.CheckoutService(
        catalog=database.catalog,
        runner=database.runner,
        orders=database.orders,
    )

    match await service.checkout(user_id, [{"productId": 1, "quantity": 2}]):
        case Ok(order): ...
        case Error(e): ...

Modules:

    checkout      normalize → price → execute, closed error taxonomy
    idempotency   client keys, request fingerprints, SQLAlchemy mixin
    db            SQLAlchemy adapters (catalog, atomic runner, order reads)
    orders        order history
    wire          FastAPI surface
"""

from storefront import checkout, idempotency, db, orders, wire
from storefront._types import Result, Ok, Error
from storefront.config import Settings

__version__ = "0.1.0"

__all__ = (
    "checkout",
    "idempotency",
    "db",
    "orders",
    "wire",
    "Result",
    "Ok",
    "Error",
    "Settings",
    "__version__",
)
