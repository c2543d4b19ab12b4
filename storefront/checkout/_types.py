"""
Checkout types — values flowing through the pipeline.

    CartLineRequest  ──normalize──▶  NormalizedLine
    NormalizedLine   ──price──────▶  PricedLine / PricedCart
    PricedCart       ──execute────▶  OrderResult
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from storefront._types import Cents, OrderId, ProductId, UserId


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLineRequest:
    """
    One line as submitted by the caller.

    Note: Not trusted. Duplicates per product are legal and get merged.
    """

    product_id: ProductId
    quantity: int


@dataclass(frozen=True, slots=True)
class NormalizedLine:
    """Unique by product_id; quantity is the sum over all request lines."""

    product_id: ProductId
    quantity: int


@dataclass(frozen=True, slots=True)
class PricedLine:
    product_id: ProductId
    quantity: int
    unit_price_cents: Cents
    subtotal_cents: Cents


@dataclass(frozen=True, slots=True)
class PricedCart:
    lines: tuple[PricedLine, ...]
    total_cents: Cents


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProductSnapshot:
    """
    Current price and stock of an active product.

    Note: Read-only view; the catalog owns the product record.
    """

    id: ProductId
    price_cents: Cents
    stock: int


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


SIMULATED_PAYMENT = "simulated"


@dataclass(frozen=True, slots=True)
class NewOrder:
    """Order header as handed to the unit of work."""

    user_id: UserId
    status: OrderStatus
    total_cents: Cents
    idempotency_key: str | None = None
    request_fingerprint: str | None = None


@dataclass(frozen=True, slots=True)
class PlacedOrder:
    """Identity assigned by persistence on insert."""

    id: OrderId
    created_at: datetime


@dataclass(frozen=True, slots=True)
class OrderItemResult:
    product_id: ProductId
    quantity: int
    unit_price_cents: Cents
    subtotal_cents: Cents


@dataclass(frozen=True, slots=True)
class OrderResult:
    """
    A persisted order with its items.

    replayed: True when served from an earlier request with the same
    idempotency key instead of being created now.
    """

    id: OrderId
    user_id: UserId
    status: OrderStatus
    total_cents: Cents
    created_at: datetime
    items: tuple[OrderItemResult, ...]
    replayed: bool = False

    def as_replay(self) -> OrderResult:
        return replace(self, replayed=True)


@dataclass(frozen=True, slots=True)
class StoredOrder:
    """An order together with the fingerprint of the request that created it."""

    order: OrderResult
    request_fingerprint: str | None


__all__ = (
    "CartLineRequest",
    "NormalizedLine",
    "PricedLine",
    "PricedCart",
    "ProductSnapshot",
    "OrderStatus",
    "SIMULATED_PAYMENT",
    "NewOrder",
    "PlacedOrder",
    "OrderItemResult",
    "OrderResult",
    "StoredOrder",
)
