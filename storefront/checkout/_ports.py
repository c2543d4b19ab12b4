"""
Checkout ports — collaborator protocols.

The checkout core never talks to a database directly. It consumes:

    ProductLookup   batched read of active products
    AtomicRunner    runs a unit of work atomically (all or nothing)
    UnitOfWork      writes available inside that unit
    OrderReader     reads of persisted orders

Implementations: storefront.db (SQLAlchemy) and MemoryShop (tests).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from storefront._types import Cents, OrderId, ProductId, UserId
from storefront.checkout._types import (
    NewOrder,
    OrderResult,
    PlacedOrder,
    PricedLine,
    ProductSnapshot,
    StoredOrder,
)


class ProductLookup(Protocol):
    async def lookup_active_products(
        self, ids: Sequence[ProductId]
    ) -> list[ProductSnapshot]:
        """
        Fetch all requested products in one call.

        Inactive and unknown ids are simply absent from the result.
        """
        ...


class UnitOfWork(Protocol):
    """
    Writes inside one atomic unit.

    Any exception raised while the unit runs must discard every write made
    through it.
    """

    async def decrement_stock(self, product_id: ProductId, quantity: int) -> bool:
        """
        Conditional decrement: stock -= quantity only if stock >= quantity.

        Returns True if applied, False if the product is missing, inactive
        or short. Check and write are one indivisible step.
        """
        ...

    async def insert_order(self, order: NewOrder) -> PlacedOrder: ...

    async def insert_order_items(
        self, order_id: OrderId, lines: Sequence[PricedLine]
    ) -> None: ...

    async def insert_payment(
        self, order_id: OrderId, amount_cents: Cents, method: str
    ) -> None: ...


type UnitOfWorkFn[T] = Callable[[UnitOfWork], Awaitable[T]]


class AtomicRunner(Protocol):
    async def run_atomic[T](self, work: UnitOfWorkFn[T]) -> T:
        """
        Run work in one isolated transaction.

        Commits if work returns, rolls back and re-raises if it raises,
        times out or is cancelled.
        """
        ...


class OrderReader(Protocol):
    async def find_by_idempotency_key(self, key: str) -> StoredOrder | None: ...

    async def list_for_user(self, user_id: UserId) -> list[OrderResult]: ...


__all__ = (
    "ProductLookup",
    "UnitOfWork",
    "UnitOfWorkFn",
    "AtomicRunner",
    "OrderReader",
)
