"""
In-memory shop — ProductLookup + AtomicRunner + OrderReader without a database.

Note: Только для single-process / тестов. One asyncio.Lock serializes
atomic units; writes go to a staged copy that is swapped in on success.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from storefront._types import Cents, OrderId, ProductId, UserId, utcnow
from storefront.checkout._types import (
    NewOrder,
    OrderItemResult,
    OrderResult,
    PlacedOrder,
    PricedLine,
    ProductSnapshot,
    StoredOrder,
)
from storefront.checkout._ports import UnitOfWorkFn


# ═══════════════════════════════════════════════════════════════════════════════
# State
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class MemoryProduct:
    id: ProductId
    price_cents: Cents
    stock: int
    is_active: bool = True


@dataclass(slots=True)
class MemoryOrder:
    id: OrderId
    header: NewOrder
    created_at: datetime
    items: list[OrderItemResult] = field(default_factory=list[OrderItemResult])


@dataclass(frozen=True, slots=True)
class MemoryPayment:
    order_id: OrderId
    amount_cents: Cents
    method: str


@dataclass(slots=True)
class _State:
    products: dict[ProductId, MemoryProduct] = field(default_factory=dict[ProductId, MemoryProduct])
    orders: dict[OrderId, MemoryOrder] = field(default_factory=dict[OrderId, MemoryOrder])
    payments: list[MemoryPayment] = field(default_factory=list[MemoryPayment])
    next_order_id: int = 1


class DuplicateKeyError(Exception):
    """Raised when an idempotency key is inserted twice (unique index)."""


# ═══════════════════════════════════════════════════════════════════════════════
# Unit of work over a staged copy
# ═══════════════════════════════════════════════════════════════════════════════


class _MemoryUnitOfWork:
    def __init__(self, state: _State) -> None:
        self._state = state

    async def decrement_stock(self, product_id: ProductId, quantity: int) -> bool:
        product = self._state.products.get(product_id)
        if product is None or not product.is_active or product.stock < quantity:
            return False
        product.stock -= quantity
        return True

    async def insert_order(self, order: NewOrder) -> PlacedOrder:
        if order.idempotency_key is not None and any(
            o.header.idempotency_key == order.idempotency_key
            for o in self._state.orders.values()
        ):
            raise DuplicateKeyError(order.idempotency_key)

        order_id = self._state.next_order_id
        self._state.next_order_id += 1
        created_at = utcnow()
        self._state.orders[order_id] = MemoryOrder(order_id, order, created_at)
        return PlacedOrder(order_id, created_at)

    async def insert_order_items(
        self, order_id: OrderId, lines: Sequence[PricedLine]
    ) -> None:
        self._state.orders[order_id].items.extend(
            OrderItemResult(ln.product_id, ln.quantity, ln.unit_price_cents, ln.subtotal_cents)
            for ln in lines
        )

    async def insert_payment(
        self, order_id: OrderId, amount_cents: Cents, method: str
    ) -> None:
        self._state.payments.append(MemoryPayment(order_id, amount_cents, method))


# ═══════════════════════════════════════════════════════════════════════════════
# MemoryShop
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryShop:
    """
    Catalog, transactions and order reads kept in process memory.

    Example:
        shop = MemoryShop().with_product(1, price_cents=1999, stock=5)
        service = CheckoutService(catalog=shop, runner=shop, orders=shop)
    """

    def __init__(self) -> None:
        self._state = _State()
        self._lock = asyncio.Lock()

    # ── seeding / inspection ──────────────────────────────────────────────────

    def with_product(
        self,
        product_id: ProductId,
        *,
        price_cents: Cents,
        stock: int,
        is_active: bool = True,
    ) -> MemoryShop:
        self._state.products[product_id] = MemoryProduct(
            product_id, price_cents, stock, is_active
        )
        return self

    def stock_of(self, product_id: ProductId) -> int:
        return self._state.products[product_id].stock

    def set_price(self, product_id: ProductId, price_cents: Cents) -> None:
        self._state.products[product_id].price_cents = price_cents

    @property
    def order_count(self) -> int:
        return len(self._state.orders)

    @property
    def payments(self) -> list[MemoryPayment]:
        return list(self._state.payments)

    # ── ProductLookup ─────────────────────────────────────────────────────────

    async def lookup_active_products(
        self, ids: Sequence[ProductId]
    ) -> list[ProductSnapshot]:
        async with self._lock:
            wanted = set(ids)
            return [
                ProductSnapshot(p.id, p.price_cents, p.stock)
                for p in self._state.products.values()
                if p.id in wanted and p.is_active
            ]

    # ── AtomicRunner ──────────────────────────────────────────────────────────

    async def run_atomic[T](self, work: UnitOfWorkFn[T]) -> T:
        async with self._lock:
            staged = copy.deepcopy(self._state)
            result = await work(_MemoryUnitOfWork(staged))
            self._state = staged
            return result

    # ── OrderReader ───────────────────────────────────────────────────────────

    async def find_by_idempotency_key(self, key: str) -> StoredOrder | None:
        async with self._lock:
            for order in self._state.orders.values():
                if order.header.idempotency_key == key:
                    return StoredOrder(_to_result(order), order.header.request_fingerprint)
            return None

    async def list_for_user(self, user_id: UserId) -> list[OrderResult]:
        async with self._lock:
            mine = [o for o in self._state.orders.values() if o.header.user_id == user_id]
            mine.sort(key=lambda o: (o.created_at, o.id), reverse=True)
            return [_to_result(o) for o in mine]


def _to_result(order: MemoryOrder) -> OrderResult:
    return OrderResult(
        id=order.id,
        user_id=order.header.user_id,
        status=order.header.status,
        total_cents=order.header.total_cents,
        created_at=order.created_at,
        items=tuple(order.items),
    )


__all__ = (
    "MemoryProduct",
    "MemoryOrder",
    "MemoryPayment",
    "DuplicateKeyError",
    "MemoryShop",
)
