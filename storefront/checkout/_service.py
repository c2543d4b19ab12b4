"""
Checkout Service — the boundary operation.

    normalize ──▶ [replay?] ──▶ price ──▶ execute ──▶ OrderResult
                     │                       │
                     └── idempotency key ────┘ (loser of a key race replays)

Returns Result[OrderResult, CheckoutError]; expected failures are values,
never exceptions.
"""

from __future__ import annotations

from collections.abc import Iterable

from kungfu import Result, Ok, Error
from combinators import lift as L

from storefront import idempotency as I
from storefront._types import UserId
from storefront.logging_config import get_logger
from storefront.checkout._types import NormalizedLine, OrderResult
from storefront.checkout._errors import (
    CheckoutError,
    InvalidInput,
    StockConflict,
    TransactionFailure,
)
from storefront.checkout._normalize import RawLine, normalize_cart
from storefront.checkout._validate import price_cart
from storefront.checkout._execute import IdempotencyTag, execute_checkout
from storefront.checkout._ports import AtomicRunner, OrderReader, ProductLookup

log = get_logger(__name__)

KEY_NAMESPACE = "checkout"


class CheckoutService:
    """
    Turns a raw cart into a paid order.

    Example:
        service = CheckoutService(catalog=shop, runner=shop, orders=shop)
        match await service.checkout(1, [{"productId": 7, "quantity": 2}]):
            case Ok(order):
                ...
            case Error(StockConflict(ids)):
                ...
    """

    def __init__(
        self,
        catalog: ProductLookup,
        runner: AtomicRunner,
        orders: OrderReader,
    ) -> None:
        self._catalog = catalog
        self._runner = runner
        self._orders = orders

    async def checkout(
        self,
        user_id: UserId,
        raw_items: Iterable[RawLine],
        *,
        idempotency_key: str | None = None,
    ) -> Result[OrderResult, CheckoutError]:
        items = list(raw_items)
        log.info(
            "[Checkout user=%s] attempt lines=%d keyed=%s",
            user_id, len(items), idempotency_key is not None,
        )

        result = await self._checkout(user_id, items, idempotency_key)

        match result:
            case Ok(order):
                log.info(
                    "[Checkout user=%s] %s order=%s total_cents=%s",
                    user_id, "replayed" if order.replayed else "placed",
                    order.id, order.total_cents,
                )
            case Error(InvalidInput(message, details)):
                log.info("[Checkout user=%s] rejected: %s %s", user_id, message, list(details))
            case Error(StockConflict(ids)):
                log.info("[Checkout user=%s] stock conflict: %s", user_id, list(ids))
            case Error(TransactionFailure(message)):
                log.error("[Checkout user=%s] transaction failed: %s", user_id, message)

        return result

    async def _checkout(
        self,
        user_id: UserId,
        items: list[RawLine],
        raw_key: str | None,
    ) -> Result[OrderResult, CheckoutError]:
        if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
            return Error(InvalidInput("Invalid user", ("userId: must be a positive integer",)))

        match normalize_cart(items):
            case Ok(lines):
                pass
            case Error(e):
                return Error(e)

        tag: IdempotencyTag | None = None
        if raw_key is not None:
            match I.parse_key(raw_key):
                case Ok(key):
                    tag = IdempotencyTag(
                        key=key.scoped(KEY_NAMESPACE, user_id),
                        fingerprint=_fingerprint(lines),
                    )
                case Error(msg):
                    return Error(InvalidInput("Invalid idempotency key", (f"Idempotency-Key: {msg}",)))

            replay = await self._replay(tag)
            if replay is not None:
                return replay

        match await price_cart(lines, self._catalog):
            case Ok(cart):
                pass
            case Error(e):
                return await self._settle(Error(e), tag)

        executed = await execute_checkout(user_id, cart, self._runner, idempotency=tag)
        return await self._settle(executed, tag)

    async def _settle(
        self,
        result: Result[OrderResult, CheckoutError],
        tag: IdempotencyTag | None,
    ) -> Result[OrderResult, CheckoutError]:
        # A concurrent request with the same key may have committed first
        # (unique index violation or its decrement consumed our stock).
        match result:
            case Error(StockConflict() | TransactionFailure() as original) if tag is not None:
                # A failed lookup keeps the original error
                match await self._replay(tag):
                    case Ok(order):
                        return Ok(order)
                    case Error(e):
                        log.warning("[Checkout] replay after %s failed: %s", type(original).__name__, e)
        return result

    async def _replay(
        self, tag: IdempotencyTag
    ) -> Result[OrderResult, CheckoutError] | None:
        found = await L.catching_async(
            lambda: self._orders.find_by_idempotency_key(tag.key),
            on_error=lambda e: TransactionFailure.from_exception("Idempotency lookup failed", e),
        )

        match found:
            case Error(e):
                return Error(e)
            case Ok(None):
                return None
            case Ok(stored):
                if stored.request_fingerprint != tag.fingerprint:
                    return Error(
                        InvalidInput(
                            "Idempotency key reused with a different cart",
                            ("Idempotency-Key: already used for another request",),
                        )
                    )
                return Ok(stored.order.as_replay())


def _fingerprint(lines: Iterable[NormalizedLine]) -> str:
    return I.fingerprint((line.product_id, line.quantity) for line in lines)


__all__ = ("KEY_NAMESPACE", "CheckoutService")
