"""
Checkout — cart in, paid order out, never oversold.

    from storefront import checkout as C

    service = C.CheckoutService(catalog=db.catalog, runner=db.runner, orders=db.orders)

    match await service.checkout(user_id, [{"productId": 1, "quantity": 2}]):
        case Ok(order):
            ...                                   # 201
        case Error(C.InvalidInput(msg, details)):
            ...                                   # 400
        case Error(C.StockConflict(ids)):
            ...                                   # 409, every offending id
        case Error(C.TransactionFailure(msg)):
            ...                                   # 500

Pipeline:

    raw items
       │
       ▼
    normalize_cart ─────── InvalidInput (empty / malformed)
       │ unique lines
       ▼
    price_cart ─────────── StockConflict (early, all lines checked)
       │ PricedCart         one batched product lookup, server prices
       ▼
    execute_checkout ───── StockConflict (late, stock moved meanwhile)
       │                   TransactionFailure (db error, timeout)
       │  ┌─ one transaction ──────────────────────────┐
       │  │ UPDATE stock WHERE stock >= qty  (per line) │
       │  │ INSERT order, items, payment                │
       │  └─────────────────────────────────────────────┘
       ▼
    OrderResult

The stock check in price_cart is advisory; the conditional decrement inside
the transaction is what guarantees stock never goes negative.
"""

from storefront.checkout._types import (
    CartLineRequest,
    NormalizedLine,
    PricedLine,
    PricedCart,
    ProductSnapshot,
    OrderStatus,
    SIMULATED_PAYMENT,
    NewOrder,
    PlacedOrder,
    OrderItemResult,
    OrderResult,
    StoredOrder,
)
from storefront.checkout._errors import (
    InvalidInput,
    StockConflict,
    TransactionFailure,
    CheckoutError,
    report_conflict,
    CheckoutAborted,
    abort_reason,
)
from storefront.checkout._ports import (
    ProductLookup,
    UnitOfWork,
    UnitOfWorkFn,
    AtomicRunner,
    OrderReader,
)
from storefront.checkout._normalize import RawLine, normalize_cart
from storefront.checkout._validate import price_lines, price_cart
from storefront.checkout._execute import IdempotencyTag, checkout_unit, execute_checkout
from storefront.checkout._service import KEY_NAMESPACE, CheckoutService
from storefront.checkout._memory import DuplicateKeyError, MemoryShop

__all__ = (
    # Types
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
    # Errors
    "InvalidInput",
    "StockConflict",
    "TransactionFailure",
    "CheckoutError",
    "report_conflict",
    "CheckoutAborted",
    "abort_reason",
    # Ports
    "ProductLookup",
    "UnitOfWork",
    "UnitOfWorkFn",
    "AtomicRunner",
    "OrderReader",
    # Operations
    "RawLine",
    "normalize_cart",
    "price_lines",
    "price_cart",
    "IdempotencyTag",
    "checkout_unit",
    "execute_checkout",
    # Service
    "KEY_NAMESPACE",
    "CheckoutService",
    # In-memory adapter
    "DuplicateKeyError",
    "MemoryShop",
)
